"""
Core Engine
===========

Configuration constants, run settings and the deduplication engine itself.
"""
