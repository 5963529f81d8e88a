"""Deadline calculation and reminder engine for social-insurance filings."""

__version__ = "0.1.0"
