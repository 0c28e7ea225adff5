"""
Shared constants used across TrackLore.
"""

# Match results
UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_ARTIST = "Unknown Artist"
DEFAULT_SOURCE = "Shazam"  # shown when no enrichment source identified the track

# History
HISTORY_KEY = "songHistory"
HISTORY_MAX_ENTRIES = 20
HISTORY_FORMAT_VERSION = 1

# Data paths
DEFAULT_DATA_DIR = "~/.local/share/tracklore"
HISTORY_DB_FILENAME = "history.db"

# Network settings
DEFAULT_LOOKUP_TIMEOUT = 10  # seconds
DEFAULT_POOL_SIZE = 10

# Lookup endpoints
JIKAN_API_BASE = "https://api.jikan.moe/v4"
TMDB_API_BASE = "https://api.themoviedb.org/3"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

# Enrichment
DEFAULT_ENRICHMENT_POLICY = "sequential"
DEFAULT_ENRICHMENT_SOURCES = "tmdb,jikan"
DEFAULT_JIKAN_MAX_CANDIDATES = 5
DEFAULT_ENRICHMENT_WORKERS = 4
