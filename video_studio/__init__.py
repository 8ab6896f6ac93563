"""Prompt-to-video studio: generation API, status polling and local storage."""

__version__ = "0.1.0"
