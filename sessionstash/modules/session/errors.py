"""Session error taxonomy."""


class SessionError(Exception):
    """Base class for session errors."""


class StorageUnavailable(SessionError):
    """No cache store is configured."""


class SessionNotFound(SessionError):
    """No identifier on the request, or the identifier is unknown to the store."""
