"""Suppression file persistence: ledger, reconciliation, and canonical XML formatting."""
