"""
Error taxonomy shared by the stores, the mapping engine and the orchestrator.
"""


class EbaySyncError(Exception):
    """Base exception for the sync service."""
    pass


class ConfigurationError(EbaySyncError):
    """Duplicate or malformed mapping rule, or missing wiring."""
    pass


class NotFoundError(EbaySyncError):
    """Unknown mapping, job, product or override."""
    pass


class UpstreamError(EbaySyncError):
    """A platform call failed."""
    pass


class NotConnectedError(UpstreamError):
    """A platform token is missing, so no sync can run."""

    def __init__(self, platform: str):
        super().__init__(f"{platform} not connected")
        self.platform = platform


class PersistenceError(EbaySyncError):
    """Store-layer failure."""
    pass
