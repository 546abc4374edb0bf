"""Custom exceptions for the insights trend engine."""


class InsightsError(Exception):
    """Base exception for the insights engine."""
    pass


class InputOrderingError(InsightsError, ValueError):
    """Raised when a sample series is not sorted and deduplicated by timestamp.

    The extractor fails fast instead of re-sorting, so an upstream ordering
    bug surfaces here rather than as a silently different trend.
    """

    def __init__(self, message: str, entity_id: str = None, index: int = None):
        super().__init__(message)
        self.entity_id = entity_id
        self.index = index


class SampleSourceError(InsightsError):
    """Raised when the snapshot source cannot return samples."""
    pass
