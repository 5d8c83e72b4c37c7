"""spoolbind - material station matching for multi-material print jobs."""

__version__ = "0.3.0"
