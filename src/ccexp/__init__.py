"""ccexp: browse Claude instruction files, slash commands and settings."""

__version__ = "0.4.0"
