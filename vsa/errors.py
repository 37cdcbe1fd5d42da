"""Error types raised by the external collaborators."""

from typing import Optional


class VSAError(Exception):
    """Base error for scoping-engine operations."""
    pass


class ConfigurationError(VSAError):
    """Missing or invalid settings for a collaborator."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message)
        self.setting = setting


class CatalogError(VSAError):
    """Scoping-data API request failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class TranscriptError(VSAError):
    """Call-recording provider request failed."""

    def __init__(self, message: str, platform: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.platform = platform
        self.status_code = status_code


class LLMError(VSAError):
    """Chat-completion request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
