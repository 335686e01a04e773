"""Debug dump of a dataclass record, field by field."""

from __future__ import annotations

import dataclasses
from typing import Any


def dump_str_struct(obj: Any) -> None:
    """Print each field of a dataclass instance in declaration order."""
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"expected a dataclass instance, got {type(obj).__name__}")
    for i, field in enumerate(dataclasses.fields(obj)):
        print(f" #{i:2d}: ({field.name})  {getattr(obj, field.name)}")