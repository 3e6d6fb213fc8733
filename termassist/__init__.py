"""Run cataloged shell command templates in terminal sessions."""

__version__ = "0.3.0"
