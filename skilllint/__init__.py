"""skilllint: loader and linter for markdown skill corpora."""

__version__ = "0.1.0"
