"""
Typed values over an untyped session data bag.

Values round-trip through JSON before they come back from the store, so all
numbers are kept in one wide representation: a Python ``float`` (IEEE 754
double). ``widen`` applies that rule on the way in and ``narrow`` converts
back to the requested kind on the way out.

Conversion table:

    kind                       widen (store)             narrow (load)
    INT8..INT64, INT           int -> float              float -> truncate, wrap to width
    UINT8..UINT64, UINT, BYTE  int -> float              float -> truncate, wrap to width
    FLOAT32                    round to single -> float  float -> round to single
    FLOAT64                    float as-is               float as-is
    BOOL / STRING / BYTES      as-is                     exact type only
    *_LIST                     list as-is                list with matching elements
    LIST                       list as-is                any list

Precision ceiling: integers are exact up to 2**53 in magnitude. Larger
integers are rounded when widened; narrowing returns the rounded value,
not the value that was set. Narrowing wraps out-of-range values to the kind's width
(two's complement for signed kinds), the same as a C cast.

Getters never raise. A missing key or a value that cannot be read as the
requested kind gives ``(zero_value, False)``; an unknown kind gives
``(None, False)``.
"""

import math
import struct
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ValueKind(str, Enum):
    """Kinds of values a session data bag can be read as."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    INT = "int"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINT = "uint"
    BYTE = "byte"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    STRING = "string"
    BYTES = "bytes"
    INT_LIST = "int_list"
    INT64_LIST = "int64_list"
    STRING_LIST = "string_list"
    BOOL_LIST = "bool_list"
    LIST = "list"


# kind -> (bits, signed)
INTEGER_KINDS: Dict[ValueKind, Tuple[int, bool]] = {
    ValueKind.INT8: (8, True),
    ValueKind.INT16: (16, True),
    ValueKind.INT32: (32, True),
    ValueKind.INT64: (64, True),
    ValueKind.INT: (64, True),
    ValueKind.UINT8: (8, False),
    ValueKind.UINT16: (16, False),
    ValueKind.UINT32: (32, False),
    ValueKind.UINT64: (64, False),
    ValueKind.UINT: (64, False),
    ValueKind.BYTE: (8, False),
}

FLOAT_KINDS = frozenset({ValueKind.FLOAT32, ValueKind.FLOAT64})

LIST_KINDS = frozenset(
    {
        ValueKind.INT_LIST,
        ValueKind.INT64_LIST,
        ValueKind.STRING_LIST,
        ValueKind.BOOL_LIST,
        ValueKind.LIST,
    }
)

ZERO_VALUES: Dict[ValueKind, Any] = {
    **{kind: 0 for kind in INTEGER_KINDS},
    ValueKind.FLOAT32: 0.0,
    ValueKind.FLOAT64: 0.0,
    ValueKind.BOOL: False,
    ValueKind.STRING: "",
    ValueKind.BYTES: b"",
    **{kind: None for kind in LIST_KINDS},
}

MAX_EXACT_INTEGER = 2 ** 53


def zero_value(kind: ValueKind) -> Any:
    """Zero value of kind; None for an unknown kind."""
    try:
        return ZERO_VALUES[ValueKind(kind)]
    except ValueError:
        return None


def is_number(value: Any) -> bool:
    """True for int and float values; bool is not a number here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def integer_range(kind: ValueKind) -> Tuple[int, int]:
    """Inclusive (min, max) of an integer kind."""
    bits, signed = INTEGER_KINDS[kind]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def to_float32(value: float) -> float:
    """Round a float to single precision; overflow becomes +/-inf."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def wrap_integer(number: int, bits: int, signed: bool) -> int:
    number &= (1 << bits) - 1
    if signed and number >= 1 << (bits - 1):
        number -= 1 << bits
    return number


def widen(value: Any, kind: Optional[ValueKind] = None) -> Any:
    """
    Normalize a value for storage in a data bag.

    Without a kind: bool is kept, any int becomes float, tuples become lists,
    bytearray becomes bytes, everything else is stored as-is.

    With a kind the value is checked against it first: integer kinds are
    range-checked for their width and FLOAT32 is rounded to single precision.

    Raises:
        TypeError: If value does not match kind
        ValueError: If an integer is out of range for kind
    """
    if kind is None:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return float(value)
        if isinstance(value, tuple):
            return list(value)
        if isinstance(value, bytearray):
            return bytes(value)
        return value

    kind = ValueKind(kind)
    if kind in INTEGER_KINDS:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{kind.value} value must be an int, got {type(value).__name__}")
        low, high = integer_range(kind)
        if not low <= value <= high:
            raise ValueError(f"{value} is out of range for {kind.value} [{low}, {high}]")
        return float(value)

    if kind in FLOAT_KINDS:
        if not is_number(value):
            raise TypeError(f"{kind.value} value must be a number, got {type(value).__name__}")
        number = float(value)
        return to_float32(number) if kind is ValueKind.FLOAT32 else number

    stored = widen(value)
    _, ok = narrow(stored, kind)
    if not ok:
        raise TypeError(f"{type(value).__name__} value cannot be stored as {kind.value}")
    return stored


def _narrow_list(stored: Any, kind: ValueKind) -> Tuple[Optional[List[Any]], bool]:
    if not isinstance(stored, (list, tuple)):
        return None, False
    items = list(stored)
    if kind is ValueKind.LIST:
        return items, True
    if kind is ValueKind.STRING_LIST:
        ok = all(isinstance(item, str) for item in items)
    elif kind is ValueKind.BOOL_LIST:
        ok = all(isinstance(item, bool) for item in items)
    else:
        ok = all(isinstance(item, int) and not isinstance(item, bool) for item in items)
        if ok and kind is ValueKind.INT64_LIST:
            low, high = integer_range(ValueKind.INT64)
            ok = all(low <= item <= high for item in items)
    return (items, True) if ok else (None, False)


def narrow(stored: Any, kind: ValueKind) -> Tuple[Any, bool]:
    """Read a stored value as kind. Returns (value, ok); never raises."""
    try:
        kind = ValueKind(kind)
    except ValueError:
        return None, False
    zero = ZERO_VALUES[kind]

    if kind in INTEGER_KINDS:
        if not is_number(stored):
            return zero, False
        if isinstance(stored, float):
            if not math.isfinite(stored):
                return zero, False
            stored = int(stored)
        bits, signed = INTEGER_KINDS[kind]
        return wrap_integer(stored, bits, signed), True

    if kind in FLOAT_KINDS:
        if not is_number(stored):
            return zero, False
        try:
            number = float(stored)
        except OverflowError:
            return zero, False
        return (to_float32(number) if kind is ValueKind.FLOAT32 else number), True

    if kind is ValueKind.BOOL:
        return (stored, True) if isinstance(stored, bool) else (zero, False)
    if kind is ValueKind.STRING:
        return (stored, True) if isinstance(stored, str) else (zero, False)
    if kind is ValueKind.BYTES:
        if isinstance(stored, (bytes, bytearray)):
            return bytes(stored), True
        return zero, False

    return _narrow_list(stored, kind)


class TypedAccessors:
    """
    Typed access over a ``data`` mapping.

    Mixed into session records. Every getter returns ``(value, found)``.
    """

    data: Dict[str, Any]

    def get(self, key: str) -> Tuple[Any, bool]:
        """Get the raw stored value."""
        if key in self.data:
            return self.data[key], True
        return None, False

    def set(self, key: str, value: Any, kind: Optional[ValueKind] = None) -> None:
        """Store value under key, widening numbers (see widen())."""
        self.data[key] = widen(value, kind)

    def delete(self, key: str) -> None:
        """Remove key; a missing key is ignored."""
        self.data.pop(key, None)

    def get_as(self, key: str, kind: ValueKind) -> Tuple[Any, bool]:
        value, found = self.get(key)
        if not found:
            return zero_value(kind), False
        return narrow(value, kind)

    def get_int8(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.INT8)

    def get_int16(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.INT16)

    def get_int32(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.INT32)

    def get_int64(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.INT64)

    def get_int(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.INT)

    def get_uint8(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.UINT8)

    def get_uint16(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.UINT16)

    def get_uint32(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.UINT32)

    def get_uint64(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.UINT64)

    def get_uint(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.UINT)

    def get_byte(self, key: str) -> Tuple[int, bool]:
        return self.get_as(key, ValueKind.BYTE)

    def get_float32(self, key: str) -> Tuple[float, bool]:
        return self.get_as(key, ValueKind.FLOAT32)

    def get_float64(self, key: str) -> Tuple[float, bool]:
        return self.get_as(key, ValueKind.FLOAT64)

    def get_bool(self, key: str) -> Tuple[bool, bool]:
        return self.get_as(key, ValueKind.BOOL)

    def get_str(self, key: str) -> Tuple[str, bool]:
        return self.get_as(key, ValueKind.STRING)

    def get_bytes(self, key: str) -> Tuple[bytes, bool]:
        return self.get_as(key, ValueKind.BYTES)

    def get_int_list(self, key: str) -> Tuple[Optional[List[int]], bool]:
        return self.get_as(key, ValueKind.INT_LIST)

    def get_int64_list(self, key: str) -> Tuple[Optional[List[int]], bool]:
        return self.get_as(key, ValueKind.INT64_LIST)

    def get_str_list(self, key: str) -> Tuple[Optional[List[str]], bool]:
        return self.get_as(key, ValueKind.STRING_LIST)

    def get_bool_list(self, key: str) -> Tuple[Optional[List[bool]], bool]:
        return self.get_as(key, ValueKind.BOOL_LIST)

    def get_list(self, key: str) -> Tuple[Optional[List[Any]], bool]:
        return self.get_as(key, ValueKind.LIST)
