"""WeShare: link-in-bio site builder core."""

__version__ = "0.1.0"
