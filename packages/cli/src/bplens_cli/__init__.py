"""bplens command-line interface and terminal review UI."""
