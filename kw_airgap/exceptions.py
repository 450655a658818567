"""Exceptions related to kw-airgap."""

__all__ = [
    "AirgapException",
    "ConfigurationError",
    "InvalidManifestError",
    "MalformedReferenceError",
    "DiscoveryError",
    "MissingArchiveError",
    "TransportError",
]


class AirgapException(Exception):
    """Generic base exception used for this library."""


class ConfigurationError(AirgapException):
    """Raised when a required parameter is missing or invalid."""


class InvalidManifestError(ConfigurationError):
    """Raised when a dependency manifest is not formatted as expected."""


class MalformedReferenceError(AirgapException):
    """Raised when a manifest entry does not match the expected reference grammar."""


class DiscoveryError(AirgapException):
    """Raised when a required external listing could not be fetched or parsed."""


class MissingArchiveError(AirgapException):
    """Raised when a local archive needed for a push does not exist."""

    def __init__(self, archive: str) -> None:
        super().__init__(f"File {archive} does not exist.")
        self.archive = archive


class TransportError(AirgapException):
    """Raised when there is a failure running an external transport command."""


class DockerException(TransportError):
    """Raised when there is a failure running a docker command."""


class KwctlException(TransportError):
    """Raised when there is a failure running a kwctl command."""


class HelmException(TransportError):
    """Raised when there is a failure running a helm command."""
