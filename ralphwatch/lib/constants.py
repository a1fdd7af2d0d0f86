"""Shared constants for ralphwatch."""

import re

# Derived story statuses
STATUS_AVAILABLE = "available"
STATUS_VERIFYING = "verifying"
STATUS_DONE = "done"
STATUS_NEW = "new"
CLAIMED_PREFIX = "claimed by "

# Uptime strings from the worker runtime, e.g. "42 seconds ago", "3 minutes ago"
UPTIME_PATTERN = re.compile(r'(\d+)\s*(second|minute|hour|day)')
UPTIME_UNIT_MS = {
    "second": 1_000,
    "minute": 60_000,
    "hour": 3_600_000,
    "day": 86_400_000,
}

RECENT_COMMITS_LIMIT = 10
DEFAULT_LOG_LINES = 50
