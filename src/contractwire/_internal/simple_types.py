from __future__ import annotations

import datetime
import decimal
import enum
import fractions
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any

from contractwire._internal.type_checks import runtime_class_of


@dataclass(frozen=True, slots=True)
class SimpleTypePolicy:
    """Internal policy deciding which parameter types the container never constructs.

    Simple types are scalars and value objects: the container only fills them
    from configuration or from parameter defaults. They are also the types whose
    constant values are printed inline in construction logs.
    """

    simple_base_types: tuple[type[Any], ...] = (
        str,
        bytes,
        int,
        float,
        complex,
        bool,
        type(None),
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
        fractions.Fraction,
        enum.Enum,
    )

    def is_simple(self, candidate: Any) -> bool:
        """Return true when a type key denotes a simple type.

        Args:
            candidate: Type key (class or generic alias) being checked.

        """
        runtime_class = runtime_class_of(candidate)
        if runtime_class is None:
            return False
        return issubclass(runtime_class, self.simple_base_types)

    def is_simple_value(self, value: object) -> bool:
        """Return true when a value is printed inline by construction logs."""
        return value is None or isinstance(value, self.simple_base_types)


SIMPLE_TYPES = SimpleTypePolicy()


__all__ = ["SIMPLE_TYPES", "SimpleTypePolicy"]
