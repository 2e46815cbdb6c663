"""Biz-Niz Pro - AI turnaround strategy engine for poorly-rated local businesses."""

__version__ = "0.1.0"
