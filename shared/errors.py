"""Error taxonomy shared by the sync clients and the pipeline."""
from typing import Optional


class DocSyncError(Exception):
    """Base class for every error raised by docsync."""


class AuthenticationError(DocSyncError):
    """No usable client or credential for a platform."""


class ConfigurationError(DocSyncError):
    """A required identifier is missing or cannot be parsed."""


class RemoteRequestError(DocSyncError):
    """Transport or API-level failure reported by a remote platform."""

    def __init__(self, platform: str, message: str, status_code: Optional[int] = None):
        self.platform = platform
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"{platform} request failed ({status_code}): {message}")
        else:
            super().__init__(f"{platform} request failed: {message}")


class FallbackExhaustedError(DocSyncError):
    """Both the database create and the child-page fallback failed."""

    def __init__(self, database_error: Exception, fallback_error: Exception):
        self.database_error = database_error
        self.fallback_error = fallback_error
        super().__init__(
            f"Creating under database failed ({database_error}); "
            f"creating as child page also failed ({fallback_error})"
        )
