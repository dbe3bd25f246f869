"""Application constants - centralized configuration values."""

# =============================================================================
# Catalog
# =============================================================================
# Served by GET /api/videos. Ids must line up with the video<N>.mp4 numbering.
DEFAULT_CATALOG = [
    {"id": 1, "title": "Introduction to Programming", "url": "http://example.com/video1.mp4"},
    {"id": 2, "title": "Data Structures", "url": "http://example.com/video2.mp4"},
    {"id": 3, "title": "Algorithms", "url": "http://example.com/video3.mp4"},
]

# =============================================================================
# Blob store
# =============================================================================
STORE_BUSY_TIMEOUT = 30.0  # seconds SQLite waits on a locked database
STORE_JOURNAL_MODE = "WAL"  # readers in one context never block the writer in another

# =============================================================================
# Playback
# =============================================================================
DEFAULT_VIDEO_MIME = "video/mp4"
BLOB_URL_PREFIX = "/blob/"

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
DOWNLOAD_TIMEOUT = 300.0  # Videos are fetched whole, no resumable downloads
HTTPX_TIMEOUT = 10.0

# =============================================================================
# HTTP pool
# =============================================================================
POOL_MAX_CONNECTIONS = 20
POOL_MAX_KEEPALIVE = 10
POOL_KEEPALIVE_EXPIRY = 30

# =============================================================================
# Retry
# =============================================================================
CATALOG_MAX_RETRIES = 3
