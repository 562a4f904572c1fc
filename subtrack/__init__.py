"""
SubTrack - Source Package

A personal finance tracker built around a monthly calendar.
The user picks a month, sees the operations for that month and
the balance that remains.

DESIGN PRINCIPLES:
1. Nothing is stored before it is validated
2. Storage errors and validation errors stay distinguishable
3. Amounts are signed: expenses negative, income positive
4. Every user action is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SubTrack Team"
