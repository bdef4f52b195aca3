"""Lifecycle automation for GitHub Discussions."""

__version__ = "0.1.0"
