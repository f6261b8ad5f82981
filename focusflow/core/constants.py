"""Constants used throughout the FocusFlow application."""


# Storage
STORAGE_KEY = "focusflow-state-v1"
CURRENT_VERSION = 1
DATA_DIR_NAME = ".focusflow"

# Analytics
STREAK_LOOKBACK_DAYS = 365

# First-run defaults
DEFAULT_PROJECT_ID = "inbox"
DEFAULT_PROJECT_NAME = "Inbox"
DEFAULT_PROJECT_COLOR = "sky"

WELCOME_TASK_ID = "welcome-task"
WELCOME_TASK_TITLE = "Welcome to FocusFlow"
WELCOME_TASK_DESCRIPTION = "Edit or complete this task to get a feel for the workflow."
WELCOME_TASK_TAGS = ["getting-started"]

# Project color tokens offered by the front end
PROJECT_COLORS = ["sky", "violet", "emerald", "amber", "rose", "slate"]

# Advisory messages surfaced to the front end
SAVE_FAILED_MESSAGE = "Your changes could not be saved. They will be kept until you close the app."
DATA_RESET_MESSAGE = "We had to reset your data because it looked corrupted."
