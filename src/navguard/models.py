"""Centralized defaults for timeouts, polling, and content heuristics."""

# Timeouts (seconds)
DEFAULT_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 0.25
PAGE_LOAD_TIMEOUT = 30.0
INTERACTION_TIMEOUT = 10.0
NAVIGATION_TIMEOUT = 15.0
RESPONSE_TIMEOUT = 15.0

# DOM quiescence
DEFAULT_STABILITY_WINDOW = 0.5
DEFAULT_QUIET_CAP = 5.0

# Text heuristic tier scans at most this many visible text nodes
TEXT_SCAN_LIMIT = 50

# Chat-style response classification
FAILURE_MARKERS = ("¯\\_(ツ)_/¯", "¯_(ツ)_/¯", "AGENT_FAILED")
MIN_RESPONSE_LENGTH = 5
LENGTHY_RESPONSE_CHARS = 80

# Browser
DEFAULT_BROWSER = "chromium"
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")
DEFAULT_VIEWPORT = (1920, 1080)
