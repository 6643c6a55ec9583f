"""
HTTP models of the reference session service.

Byte values travel as ``{"__bytes__": "<base64>"}``, the same form the
storage codec writes to Redis.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from ..session import SessionLike, ValueKind
from ..storage import tag_bytes, untag_bytes

# Request Models (API Input)


class SetValueRequest(BaseModel):
    """Request to store a value in the session data bag."""

    value: Any = Field(..., description="JSON value to store; bytes as {\"__bytes__\": base64}")
    kind: Optional[ValueKind] = Field(
        None, description="Declared kind; integers are range-checked for its width"
    )

    @field_validator("value", mode="before")
    @classmethod
    def decode_bytes(cls, value: Any) -> Any:
        return untag_bytes(value)


# Response Models (API Output)


class SessionResponse(BaseModel):
    """Session details."""

    session_id: str = Field(..., description="Session identifier")
    expire_at: Optional[int] = Field(None, description="Expiry as Unix seconds")
    keys: List[str] = Field(default_factory=list, description="Keys in the data bag")
    data: Dict[str, Any] = Field(default_factory=dict, description="Session data bag")

    @field_serializer("data")
    def serialize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return tag_bytes(data)

    @classmethod
    def from_session(cls, session: SessionLike) -> "SessionResponse":
        return cls(
            session_id=session.session_id,
            expire_at=session.expire_at,
            keys=sorted(session.data),
            data=session.data,
        )


class ValueResponse(BaseModel):
    """Typed read of one session value."""

    key: str
    kind: Optional[ValueKind] = None
    value: Any = None
    found: bool

    @field_serializer("value")
    def serialize_value(self, value: Any) -> Any:
        return tag_bytes(value)


class StatusResponse(BaseModel):
    """Whether the request carries a live session."""

    authenticated: bool
