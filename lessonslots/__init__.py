"""
lessonslots - bookable lesson slots for a driving school calendar.
"""

__version__ = "0.1.0"
