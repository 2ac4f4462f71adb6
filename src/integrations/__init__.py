"""Clients for external services the pipeline hands content to."""
