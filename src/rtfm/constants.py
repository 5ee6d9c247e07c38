"""Application-level constants for rtfm.

This module keeps only cross-cutting app/file/path constants and the
built-in defaults that configuration can override.
"""

# ============================================================================
# Application identity
# ============================================================================

APP_NAME = "rtfm"

# ============================================================================
# Default directories and paths
# ============================================================================

# User data directory (created in home directory)
USER_DATA_DIR = f"~/.{APP_NAME}"

# Config file looked up when --config is not given
DEFAULT_CONFIG_FILE = f"{USER_DATA_DIR}/config.json"

LOG_FILE_EXTENSION = ".log"

# ============================================================================
# Documentation defaults
# ============================================================================

DEFAULT_SECTION = 1
MIN_SECTION = 1
MAX_SECTION = 9

# Quiet interval before a burst of keystrokes triggers a filter
DEBOUNCE_MS = 150

# Parsed documents kept in memory
CACHE_CAPACITY = 100

# ============================================================================
# Navigation
# ============================================================================

# Page Up/Down jump in the command list (entries)
LIST_PAGE_SIZE = 50

# Page Up/Down jump in the document pane (lines)
DOCUMENT_PAGE_SIZE = 30

# Viewport heights used until the UI reports real ones
DEFAULT_DOCUMENT_VIEWPORT = 30
DEFAULT_LIST_VIEWPORT = 20

# ============================================================================
# External tools
# ============================================================================

MAN_PROGRAM = "man"
TLDR_PROGRAM = "tldr"

# man-db exit status for "No manual entry"
MAN_EXIT_NOT_FOUND = 16
