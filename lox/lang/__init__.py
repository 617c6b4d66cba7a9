"""Session control, error reporting and the interactive shell."""
