from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Protocol

from .values import TypedAccessors

BASE_RECORD_FIELDS = ("session_id", "expire_at", "data")


class SessionLike(Protocol):
    """Anything the session manager can persist."""

    session_id: str
    expire_at: Optional[int]
    data: Dict[str, Any]

    def to_record(self) -> Dict[str, Any]:
        """Serializable record persisted in the cache store."""
        ...

    def load_record(self, record: Dict[str, Any]) -> None:
        """Restore state from a record produced by to_record()."""
        ...


@dataclass
class Session(TypedAccessors):
    """
    Base session record.

    Attributes:
        session_id: Opaque identifier, also the cookie/form value; cannot be
            changed once assigned
        expire_at: Absolute expiry as Unix seconds, None to rely on the
            store's TTL alone
        data: Session data bag
    """

    session_id: str = ""
    expire_at: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "session_id":
            current = self.__dict__.get("session_id")
            if current and value != current:
                raise ValueError(f"session_id is already assigned ({current})")
        super().__setattr__(name, value)

    def to_record(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "expire_at": self.expire_at,
            "data": self.data,
        }

    def load_record(self, record: Dict[str, Any]) -> None:
        self.session_id = record.get("session_id") or ""
        self.expire_at = record.get("expire_at")
        self.data = dict(record.get("data") or {})


@dataclass
class ExtendedSession(TypedAccessors):
    """
    Base for application sessions with their own persisted fields.

    Holds a base Session and exposes its identifier, expiry and data bag.
    Fields declared by subclasses are stored next to them in the same record:

        @dataclass
        class UserSession(ExtendedSession):
            user_id: Optional[int] = None
    """

    session: Session = field(default_factory=Session)

    def __post_init__(self):
        clashes = set(self._extra_fields()) & set(BASE_RECORD_FIELDS)
        if clashes:
            raise TypeError(f"{type(self).__name__} redefines base record fields: {sorted(clashes)}")

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @session_id.setter
    def session_id(self, value: str) -> None:
        self.session.session_id = value

    @property
    def expire_at(self) -> Optional[int]:
        return self.session.expire_at

    @expire_at.setter
    def expire_at(self, value: Optional[int]) -> None:
        self.session.expire_at = value

    @property
    def data(self) -> Dict[str, Any]:
        return self.session.data

    @data.setter
    def data(self, value: Dict[str, Any]) -> None:
        self.session.data = value

    def _extra_fields(self) -> List[str]:
        return [f.name for f in fields(self) if f.name != "session"]

    def to_record(self) -> Dict[str, Any]:
        record = self.session.to_record()
        for name in self._extra_fields():
            record[name] = getattr(self, name)
        return record

    def load_record(self, record: Dict[str, Any]) -> None:
        self.session.load_record(record)
        for name in self._extra_fields():
            if name in record:
                setattr(self, name, record[name])
