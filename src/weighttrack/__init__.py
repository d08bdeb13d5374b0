"""Personal weight tracking: daily averages, trends, streaks and milestones."""

__version__ = "0.1.0"
