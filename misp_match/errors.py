"""Exception hierarchy for the MISP match pipeline."""


class MatchError(Exception):
    """Base class for all fatal pipeline errors."""

    pass


class InputError(MatchError):
    """Raised when the Wazuh alert read from stdin is unusable."""

    pass


class ConfigError(MatchError):
    """Raised when configuration is missing or unreadable."""

    pass


class NetworkError(MatchError):
    """Base class for failures talking to MISP."""

    pass


class RequestBuildError(NetworkError):
    """Raised when the search request cannot be constructed (e.g. bad URL)."""

    pass


class TransportError(NetworkError):
    """Raised on connection, TLS or timeout failures."""

    pass


class ResponseReadError(NetworkError):
    """Raised when the response body cannot be read."""

    pass


class ResponseParseError(MatchError):
    """Raised when the MISP response body is not a valid search result."""

    pass


class ProjectionError(MatchError):
    """Raised when a matched event cannot be reshaped into an alert."""

    pass
