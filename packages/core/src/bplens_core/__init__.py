"""Diagnostic model, configuration, report source, and the review session state machine."""
