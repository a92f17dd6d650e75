"""Resident portal API - notices, reports, scheduling, chat and more over a JSON store"""

__version__ = "1.0.0"
