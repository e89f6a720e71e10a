"""
DAG Store Constants

Storage-level constants shared by the codec, the stores and the schema manager.
"""

from typing import Final

# ==============================================================================
# SCHEMA
# ==============================================================================

# Stored in PRAGMA user_version. Any older value wipes the store on open.
CURRENT_VERSION: Final[int] = 2

# ==============================================================================
# ENGINE LIMITS
# ==============================================================================

# SQLite allows 999 bound variables per statement; leave room for the channel id
# and anything else bound next to an IN (...) list.
SQLITE_MAX_VARIABLE_NUMBER: Final[int] = 999
MAX_VARIABLE_COUNT: Final[int] = 900

# ==============================================================================
# HASH LIST CODEC
# ==============================================================================

HASH_LENGTH_PREFIX_SIZE: Final[int] = 1
MAX_HASH_LENGTH: Final[int] = 0xFF

# ==============================================================================
# TEMPORARY STORAGE
# ==============================================================================

TEMP_DIR_PREFIX: Final[str] = "dagstore-"
TEMP_DB_NAME: Final[str] = "tmp.db"

TRACE_LOGGER_NAME: Final[str] = "dagstore.trace"
