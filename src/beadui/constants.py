"""Constants for beadui."""

from __future__ import annotations

# Executable of the external issue store and the env var overriding it
BD_COMMAND = "bd"
BD_COMMAND_ENV = "BEADUI_BD"

# Seconds before a hung bd process is abandoned
BD_TIMEOUT_SECONDS = 30.0
BD_TIMEOUT_ENV = "BEADUI_BD_TIMEOUT"

# Location hint resolution: <dir>/.beads/*.db
BEADS_DIRNAME = ".beads"
BEADS_DB_SUFFIX = ".db"

# Status values the engine knows about; anything else is treated as open
STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in_progress"
STATUS_CLOSED = "closed"

# Default values
DEFAULT_PRIORITY = 2

# Columns with more distinct values than this get no per-value filter menu
CARDINALITY_THRESHOLD = 20

# Placeholder shown for issues without an assignee
NO_ASSIGNEE = "-"

# Config file location
CONFIG_DIRNAME = "beadui"
CONFIG_FILENAME = "config.toml"
CONFIG_PATH_ENV = "BEADUI_CONFIG"

# Marker replacing the home directory in abbreviated paths
HOME_MARKER = "~"


# Color mappings for CLI/TUI display
PRIORITY_COLORS = {
    0: "bright_red",
    1: "yellow",
    2: "white",
    3: "cyan",
    4: "bright_black",
}

READINESS_COLORS = {
    "ready": "bright_green",
    "blocked": "bright_red",
    "in_progress": "bright_blue",
    "closed": "bright_black",
}

# UI dropdown options (display_label, value)
STATUS_OPTIONS = [
    ("Open", STATUS_OPEN),
    ("In Progress", STATUS_IN_PROGRESS),
    ("Closed", STATUS_CLOSED),
]

PRIORITY_OPTIONS = [
    ("P0 - Critical", 0),
    ("P1 - High", 1),
    ("P2 - Medium", 2),
    ("P3 - Low", 3),
    ("P4 - Minimal", 4),
]

# Fields written back by the save pipeline, in call order
EDITABLE_FIELDS: tuple[str, ...] = ("title", "status", "priority", "assignee", "notes")
