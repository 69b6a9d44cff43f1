"""German vocabulary collection with remote sync and cached pronunciation."""
__version__ = "0.1.0"
