"""
Absence sentinel and run-time kind classification.

``None`` is an ordinary value in Python, so a property that holds ``None`` is
present. Absence is represented by the ``UNDEFINED`` singleton instead.
"""

from enum import Enum
from typing import Any


class _Undefined:
    """Singleton marker for a value that does not exist (yet)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()

# Values that cannot act as a context root
_PRIMITIVE_TYPES = (type(None), bool, int, float, complex, str, bytes)


class PropertyKind(str, Enum):
    """Run-time category of a resolved value."""

    UNDEFINED = "undefined"
    NONE = "none"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    FUNCTION = "function"
    OBJECT = "object"

    def __str__(self) -> str:
        return self.value


def is_undefined(value: Any) -> bool:
    return value is UNDEFINED


def is_primitive(value: Any) -> bool:
    """True for scalars that cannot host child properties."""
    return isinstance(value, _PRIMITIVE_TYPES)


def classify(value: Any) -> PropertyKind:
    """Compute the PropertyKind of a value.

    bool is checked before the numeric types since it subclasses int.
    Classes are callable and therefore classify as FUNCTION.
    """
    if value is UNDEFINED:
        return PropertyKind.UNDEFINED
    if value is None:
        return PropertyKind.NONE
    if isinstance(value, bool):
        return PropertyKind.BOOLEAN
    if isinstance(value, (int, float, complex)):
        return PropertyKind.NUMBER
    if isinstance(value, (str, bytes)):
        return PropertyKind.STRING
    if callable(value):
        return PropertyKind.FUNCTION
    return PropertyKind.OBJECT
