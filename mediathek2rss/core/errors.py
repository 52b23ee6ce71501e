"""Domain exceptions raised while building feeds."""


class FeedError(Exception):
    """Base exception for feed generation failures."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class InvalidIdentifierError(FeedError):
    """The requested show identifier is syntactically invalid."""


class UpstreamUnavailableError(FeedError):
    """An upstream request failed on the transport level or with an error status."""


class UpstreamMalformedError(FeedError):
    """An upstream response could not be parsed or lacks required data."""


class RemediationFailedError(FeedError):
    """Replacing missing streams via a partner backend did not work.

    Never leaves the step that raised it; callers log it and continue with
    the data they already have.
    """
