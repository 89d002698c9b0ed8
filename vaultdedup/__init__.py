"""
Vault Dedup
===========

Duplicate detection for a personal secure-file vault: exact copies,
visually similar images and confusingly named files.
"""

__version__ = "1.0.0"
