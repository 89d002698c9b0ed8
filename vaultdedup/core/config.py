"""
Engine Configuration and Constants
==================================

This module contains the global constants and defaults used by the vault
deduplication engine. It serves as a single source of truth for:

- Grouping thresholds for perceptual and name similarity
- The perceptual hash grid and luma coefficients
- The content hash algorithm
- Clustering modes and retention defaults
- File-type classification used when reading files from disk

Note:
    The hash algorithm, luma weights and grid size are part of the engine's
    output format. Stored thresholds and equality checks downstream depend on
    them, so changing any of them invalidates previously computed results.
"""

# ============================================================================
# CONTENT HASHING
# ============================================================================
# Full-content cryptographic digest used for exact-duplicate detection.
# Always computed over the entire decrypted byte sequence.

CONTENT_HASH_ALGORITHM = "sha256"

# ============================================================================
# PERCEPTUAL HASHING (AVERAGE HASH)
# ============================================================================
# Images are downsampled to GRID_SIZE x GRID_SIZE cells, each cell converted
# to luma, and one bit emitted per cell depending on whether it is brighter
# than the mean.

DEFAULT_GRID_SIZE = 8
MIN_GRID_SIZE = 2
MAX_GRID_SIZE = 64

# ITU-R BT.601 luma coefficients (R, G, B)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Two images are grouped when the share of matching bits exceeds this value
DEFAULT_PERCEPTUAL_THRESHOLD = 0.85

# ============================================================================
# NAME SIMILARITY
# ============================================================================
# Normalized Levenshtein similarity at or above which two names are grouped.

DEFAULT_NAME_THRESHOLD = 0.8

# ============================================================================
# GROUPING
# ============================================================================
# 'greedy'    - single-pass partition around a representative (default)
# 'connected' - connected components of the similarity graph

CLUSTERING_GREEDY = "greedy"
CLUSTERING_CONNECTED = "connected"
CLUSTERING_MODES = (CLUSTERING_GREEDY, CLUSTERING_CONNECTED)
DEFAULT_CLUSTERING = CLUSTERING_GREEDY

# Number of worker threads used for per-file hashing. 1 keeps everything on
# the calling thread.
DEFAULT_MAX_WORKERS = 1
MAX_WORKERS_LIMIT = 32

# Group id prefixes per category
GROUP_ID_PREFIXES = {
    "exact": "exact",
    "similar": "similar",
    "name": "name",
}

# ============================================================================
# RETENTION
# ============================================================================

DEFAULT_KEEP_STRATEGY = "newest"

# ============================================================================
# FILE TYPE CLASSIFICATION
# ============================================================================
# Used by the command-line front end when it builds records from files on
# disk. The engine itself trusts the type carried by each record.

FILE_TYPE_EXTENSIONS = {
    "image": {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tif", ".tiff", ".heic"},
    "video": {".mp4", ".mov", ".avi", ".mkv", ".webm", ".3gp"},
    "audio": {".mp3", ".wav", ".aac", ".m4a", ".ogg", ".flac"},
    "document": {".pdf", ".doc", ".docx", ".txt", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".csv"},
}
