"""
Session Module - Black Box Interface

Purpose: Manage HTTP session lifecycle and typed session data
Interface: SessionManager.create(), find(), get_or_create(), save(), delete(),
           is_logged_on(); Session typed getters
Hidden: Identifier format, record layout, numeric widening rules

Replaceable with any session backend (database, in-memory, distributed cache).
"""

from typing import Any, Optional, Tuple

from .errors import SessionError, SessionNotFound, StorageUnavailable
from .record import ExtendedSession, Session, SessionLike
from .session import RequestCarrier, SessionManager, SessionOptions
from .values import TypedAccessors, ValueKind, narrow, widen, zero_value


def get(sess: SessionLike, key: str) -> Tuple[Any, bool]:
    """Get a raw value from any session's data bag."""
    if key in sess.data:
        return sess.data[key], True
    return None, False


def get_as(sess: SessionLike, key: str, kind: ValueKind) -> Tuple[Any, bool]:
    """Get a value from any session's data bag as kind; never raises."""
    value, found = get(sess, key)
    if not found:
        return zero_value(kind), False
    return narrow(value, kind)


def set_value(sess: SessionLike, key: str, value: Any, kind: Optional[ValueKind] = None) -> None:
    """Store a value in any session's data bag, widening numbers."""
    sess.data[key] = widen(value, kind)


__all__ = [
    "ExtendedSession",
    "RequestCarrier",
    "Session",
    "SessionError",
    "SessionLike",
    "SessionManager",
    "SessionNotFound",
    "SessionOptions",
    "StorageUnavailable",
    "TypedAccessors",
    "ValueKind",
    "get",
    "get_as",
    "set_value",
    "widen",
]
