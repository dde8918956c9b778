"""
venueslots - Free gap and booking slot calculation for bookable venues.
"""

__version__ = "0.1.0"
