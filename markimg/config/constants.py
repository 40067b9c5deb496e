"""Constants for MarkImg."""

from pathlib import Path

# Application constants
APP_NAME = "markimg"

# Default paths
DEFAULT_LOG_DIR = ".logs"
DEFAULT_CONFIG_FILE = "markimg.yaml"

# Config file locations (in order of priority)
CONFIG_LOCATIONS = [
    Path.cwd() / DEFAULT_CONFIG_FILE,
    Path.home() / ".config" / APP_NAME / "config.yaml",
]

# Upload defaults
DEFAULT_LOCATION = "images"
DEFAULT_PATTERN = "${h1Index}-${imgIndex}"
DEFAULT_ALIGN = "center"
ALIGN_OPTIONS = ["left", "center", "right"]

# Managed directory layout
PENDING_DIR_NAME = "tmp"  # Sub-area holding freshly pasted images
STAGING_DIR_PREFIX = ".staging-"

# Pasted images
PASTE_PREFIX = "paste_"
PASTE_EXTENSION = ".png"
PLACEHOLDER_PREFIX = "uploading-"

# Query parameter appended to rewritten paths
CHANGE_TOKEN_PARAM = "t"

# Image formats managed by the organizer
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".svg"}

# Heading levels tracked for naming
MAX_HEADING_LEVEL = 6
