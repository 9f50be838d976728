"""gddforge: AI-assisted drafting and content sync for game design documents."""

__version__ = "0.1.0"
