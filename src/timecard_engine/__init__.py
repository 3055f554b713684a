"""Recurring timecard generation engine for school-district HR."""

__version__ = "0.1.0"
