"""
Shift Form Workflow

Desktop shift-scheduling application built around a two-step shift form:
roster-backed field cascades, validation, delayed persistence and ordered
notification side effects.
"""

__version__ = "1.0.0"
__author__ = "Shift Scheduler Team"
