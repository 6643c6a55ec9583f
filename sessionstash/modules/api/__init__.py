"""
API Module - Black Box Interface

Purpose: HTTP models for the reference session service
Interface: Request/response models
Hidden: Field validation

The API layer only orchestrates - session logic lives in the session module.
"""

from .models import SessionResponse, SetValueRequest, StatusResponse, ValueResponse

__all__ = [
    "SessionResponse",
    "SetValueRequest",
    "StatusResponse",
    "ValueResponse",
]
