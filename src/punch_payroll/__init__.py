"""Punch payroll: time-clock punches to monthly payroll summaries."""

__version__ = "0.1.0"
