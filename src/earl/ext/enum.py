# -*- test-case-name: earl.ext.test.test_enum -*-
"""
Extensions to :mod:`enum`
"""

from enum import Enum, auto, unique
from typing import TypeVar


__all__ = (
    "Enum",
    "Names",
    "auto",
    "enumFromValue",
    "unique",
)


E = TypeVar("E", bound=Enum)


def enumFromValue(enumClass: type[E], value: object) -> E | None:
    """
    Look up the member of an `Enum` class with the given value.
    Returns :obj:`None` instead of raising if there is no such member.
    """
    for member in enumClass:
        if member.value == value:
            return member

    return None


class Names(Enum):
    """
    Enumerated names.
    """

    @staticmethod
    def _generate_next_value_(
        name: str, start: int, count: int, last_values: list[object]
    ) -> str:
        return name
