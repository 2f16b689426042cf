"""Terminal client for Canvas LMS courses, assignments and file submissions."""

__version__ = "1.0.0"
