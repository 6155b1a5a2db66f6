"""Hiring-pipeline core: candidate store, auto-evaluation and offer workflow."""

__version__ = "0.1.0"
