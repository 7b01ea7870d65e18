"""Create GitHub releases from conventional commits."""

__version__ = "0.1.0"
