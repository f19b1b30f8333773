"""
Enum definitions for the application.
"""

from enum import Enum


class AchievementType(str, Enum):
    """
    How an achievement is unlocked.

    PROGRESS = unlocked when accumulated progress reaches progressGoal
    MILESTONE = unlocked by a single event (goal is always 1)
    """

    PROGRESS = "progress"
    MILESTONE = "milestone"
