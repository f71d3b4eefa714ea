"""DayFlow: hour-by-hour personal activity tracking."""

__version__ = "0.1.0"
