"""blogwriter - brainstorm, draft, review and format blog posts with Claude."""

__version__ = "0.1.0"
