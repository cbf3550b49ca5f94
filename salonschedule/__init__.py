"""
Salon work-schedule engine: rule/exception/block resolution and batch edits.
"""

__version__ = "0.1.0"
