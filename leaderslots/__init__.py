"""
leaderslots - find open appointment slots on a leader's calendar.
"""

__version__ = "0.1.0"
