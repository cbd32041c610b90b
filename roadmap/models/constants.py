"""Constants for the roadmap timeline.

This module centralizes layout numbers and scheduling defaults used throughout the application.
"""


# Grid layout (pixels)
CELL_WIDTH = 40  # one business day column
BLOCK_HEIGHT = 32  # one lane
BLOCK_GAP = 4  # gap between stacked lanes
ROW_PADDING = 8  # top/bottom padding in a swimlane row

# Business calendar
BUSINESS_DAYS_PER_WEEK = 5
HOURS_PER_DAY = 8

# Initiatives without an effort estimate are scheduled for one week
DEFAULT_EFFORT_WEEKS = 1.0

# Timeframes the timeline can display
TIMEFRAMES = ("month", "quarter", "half", "year")
DEFAULT_TIMEFRAME = "quarter"
