"""Animal shelter records: persistence, filtering and credentials."""

__version__ = "0.1.0"
