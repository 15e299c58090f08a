from __future__ import annotations


class MirrorError(Exception):
    """Base class for errors that abort a mirror run."""


class ValidationError(MirrorError):
    """Raised when a config or input fails validation."""


class DiscoveryError(MirrorError):
    """Raised when the remote listing yields no candidate artifact."""


class FetchError(MirrorError):
    """Raised when a download still fails after the retry budget is spent."""

    def __init__(self, url: str, attempts: int, last_error: str = ""):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        msg = f"Failed to download {url} after {attempts} attempts"
        if last_error:
            msg += f": {last_error}"
        super().__init__(msg)


class IntegrityError(MirrorError):
    """Raised when a fetched artifact does not match its published checksum."""


class TransformError(MirrorError):
    """Raised when decompression fails or produces no usable file."""


class RegistryError(MirrorError):
    """Raised when the release store cannot be queried."""


class PublishError(MirrorError):
    """Raised when the release store rejects a release or an upload fails."""


class ConflictError(PublishError):
    """Raised when a release for the version key already exists."""
