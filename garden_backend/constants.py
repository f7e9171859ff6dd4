"""
Application constants.
Tier thresholds, streak rules, recovery set and deployment defaults.
"""
import os

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/garden-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

# Database
DEFAULT_DATABASE_URL = "sqlite:///./garden.db"

# CORS
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "GARDEN_TRACKER_CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]

# Day boundary
DEFAULT_TIMEZONE = os.getenv("GARDEN_TRACKER_TIMEZONE", "Europe/Vienna")
DATE_KEY_FORMAT = "%Y-%m-%d"
MORNING_CUTOFF_HOUR = 12
EVENING_CUTOFF_HOUR = 20

# Garden tiers (inclusive upper bounds, ordered)
TIER_SEEDLING = "seedling"
TIER_SPROUT = "sprout"
TIER_BLOOM = "bloom"
TIER_YOUNG_TREE = "young_tree"
TIER_PALM = "palm"

TIER_THRESHOLDS = (
    (50, TIER_SEEDLING),
    (80, TIER_SPROUT),
    (110, TIER_BLOOM),
    (130, TIER_YOUNG_TREE),
)

TIER_EMOJIS = {
    TIER_SEEDLING: "🌱",     # Rest/light day
    TIER_SPROUT: "🌿",       # Maintenance day
    TIER_BLOOM: "🌸",        # Productive day
    TIER_YOUNG_TREE: "🌳",   # Peak day
    TIER_PALM: "🌴",         # Exceptional day
}

# Streak rules
PRODUCTIVE_DAY_THRESHOLD = 51
STREAK_PAUSE_DAYS = 2
STREAK_RESET_DAYS = 3
MIN_PRODUCTIVE_DAYS_PER_WEEK = 4
STREAK_LOOKBACK_DAYS = 7
NEW_USER_GRACE_DAYS = 7
RECOVERY_BONUS_TASKS = 3

STREAK_STATUS_ACTIVE = "active"
STREAK_STATUS_PAUSED = "paused"
STREAK_STATUS_RESET = "reset"

# Activities that can protect a seedling day
RECOVERY_TASK_IDS = frozenset({"PS1", "F2", "R1", "R2"})

# Diminishing returns: 1st = 100%, 2nd = 75%, 3rd+ = 50%
DIMINISHING_FACTORS = (1.0, 0.75, 0.5)

# Custom activities
CUSTOM_ACTIVITY_ID = "custom"
CUSTOM_ACTIVITY_CATEGORY = "Custom"
CUSTOM_POINTS_MIN = 1
CUSTOM_POINTS_MAX = 30

# To-dos
TODO_STATUS_OPEN = "open"
TODO_STATUS_DONE = "done"
TODO_STATUS_SNOOZED = "snoozed"
TODO_STATUS_MISSED = "missed"
MAX_TODOS_PER_DAY = 5
TODO_POINTS_MIN = 1
TODO_POINTS_MAX = 20
TODO_DAILY_POINTS_CAP = 40
TODO_SNOOZE_PENALTY = 5
TODO_MISSED_PENALTY_PERCENT = 20

# Backup
BACKUP_FORMAT_VERSION = 1
