#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Constants definition module
Defines store codes, URL scheme names and display defaults used across things-mcp
"""

from typing import Dict, FrozenSet

# ==================== Store Codes ====================

# TMTask.type
TYPE_TODO = 0
TYPE_PROJECT = 1
TYPE_HEADING = 2

ITEM_TYPE_CODES: Dict[str, int] = {
    'to-do': TYPE_TODO,
    'project': TYPE_PROJECT,
    'heading': TYPE_HEADING,
}

# TMTask.status
STATUS_INCOMPLETE = 0
STATUS_CANCELED = 2
STATUS_COMPLETED = 3

STATUS_CODES: Dict[str, int] = {
    'incomplete': STATUS_INCOMPLETE,
    'canceled': STATUS_CANCELED,
    'completed': STATUS_COMPLETED,
}

# TMTask.start when buckets are stored directly (bucket policy)
STORED_BUCKET_CODES: Dict[int, str] = {
    0: 'inbox',
    1: 'today',
    2: 'anytime',
    3: 'someday',
}

# TMTask.start when "today" is derived from startDate (date policy)
DERIVED_BUCKET_CODES: Dict[int, str] = {
    0: 'inbox',
    1: 'anytime',
    2: 'someday',
}

# TMChecklistItem.status value meaning "done"
CHECKLIST_DONE = 3

# ==================== Scheduling Policies ====================

TODAY_POLICY_BUCKET = 'bucket'
TODAY_POLICY_DATE = 'date'
TODAY_POLICIES: FrozenSet[str] = frozenset({TODAY_POLICY_BUCKET, TODAY_POLICY_DATE})

DATE_ENCODING_DAY_COUNTER = 'day_counter'
DATE_ENCODING_JULIAN = 'julian'
DATE_ENCODINGS: FrozenSet[str] = frozenset({DATE_ENCODING_DAY_COUNTER, DATE_ENCODING_JULIAN})

# Julian variant: raw value + offset = chronological Julian day number
DEFAULT_JULIAN_OFFSET = 2400001

# Day-counter variant: units per day counted from a fixed epoch
DEFAULT_DAY_COUNTER_EPOCH = '0001-01-01'
DEFAULT_DAY_COUNTER_UNITS_PER_DAY = 86400

# ==================== Period Parsing ====================

PERIOD_UNIT_DAYS: Dict[str, int] = {
    'd': 1,
    'w': 7,
    'm': 30,
    'y': 365,
}

DEFAULT_LOGBOOK_PERIOD = '7d'
DEFAULT_LOGBOOK_LIMIT = 50
MIN_LOGBOOK_LIMIT = 1
MAX_LOGBOOK_LIMIT = 100

# ==================== Store Discovery ====================

ENV_DATABASE_PATH = 'THINGS_DB_PATH'
ENV_AUTH_TOKEN = 'THINGS_AUTH_TOKEN'
ENV_DATE_ENCODING = 'THINGS_DATE_ENCODING'
ENV_TODAY_POLICY = 'THINGS_TODAY_POLICY'

GROUP_CONTAINERS_DIR = 'Library/Group Containers'
THINGS_CONTAINER_MARKER = 'culturedcode.ThingsMac'
THINGS_DATABASE_GLOB = '*/Things Database.thingsdatabase/main.sqlite'
THINGS_DATABASE_FALLBACK_GLOB = '*/*/main.sqlite'
BACKUPS_SEGMENT = 'Backups'

# ==================== URL Scheme ====================

THINGS_URL_BASE = 'things:///'
THINGS_APP_NAME = 'Things3'
DEFAULT_LAUNCH_DELAY_SECONDS = 2.0

ACTION_ADD = 'add'
ACTION_ADD_PROJECT = 'add-project'
ACTION_UPDATE = 'update'
ACTION_UPDATE_PROJECT = 'update-project'
ACTION_SEARCH = 'search'
ACTION_SHOW = 'show'

# Actions that accept an auth-token parameter
AUTH_REQUIRED_ACTIONS: FrozenSet[str] = frozenset({ACTION_UPDATE, ACTION_UPDATE_PROJECT})

TAG_DELIMITER = ','
LINE_DELIMITER = '\n'

# ==================== Display ====================

ICON_COMPLETED = '✅'
ICON_CANCELED = '❌'
ICON_OPEN = '⭕'
ICON_PROJECT = '📁'
ICON_AREA = '🏷️'
ICON_TAG = '🏷️'
CHECK_DONE = '✓'
CHECK_OPEN = '○'

AUTH_REQUIRED_MESSAGE = (
    "Update operations require authentication. Please set THINGS_AUTH_TOKEN environment variable. "
    "See README for setup instructions."
)
