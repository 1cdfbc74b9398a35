"""Skeletor - create projects from reusable skeleton repositories."""

__version__ = "0.4.0"
