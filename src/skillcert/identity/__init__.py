"""
Identity primitives supplied by the hosting environment.

- Clocks that report the current time
- Caller identity validation
"""

from .caller import is_blank, is_null_identity, require_identity
from .clock import Clock, ManualClock, SystemClock

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "is_blank",
    "is_null_identity",
    "require_identity",
]
