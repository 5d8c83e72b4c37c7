"""Command line interface for spoolbind."""
