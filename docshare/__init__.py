"""Doc-Share: document sharing, version history, mention auto-sharing and search."""

__version__ = "0.1.0"
