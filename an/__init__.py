"""an - atomic notes for a Markdown vault."""

__version__ = "0.4.0"
