"""org-activity: per-user activity reports for GitHub organizations."""

__version__ = "0.1.0"
