"""
Deduplication Errors
====================

Exception taxonomy for the deduplication engine.

- MalformedRecordError: the caller handed over a record the engine cannot
  trust (missing or ill-typed field, duplicate id). The whole batch is
  rejected.
- ImageDecodeError: image bytes could not be rasterized. Only the image
  loaders raise it; the perceptual hasher turns it into a skipped file.
- AnalysisCancelledError: a cancellation was requested mid-analysis.
"""


class DedupError(Exception):
    """Base class for every error raised by the deduplication engine."""


class MalformedRecordError(DedupError, ValueError):
    """A file record violates the input contract."""

    def __init__(self, message: str, record_id=None, field_name=None):
        super().__init__(message)
        self.record_id = record_id
        self.field_name = field_name


class ImageDecodeError(DedupError, ValueError):
    """Image content could not be decoded into a raster."""


class AnalysisCancelledError(DedupError):
    """The analysis was cancelled before it completed."""
