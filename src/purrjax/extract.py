"""Multi-step extraction through nested containers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import InvalidIndex
from .indexing import ABSENT, get_step
from .values import attributes_of

logger = logging.getLogger(__name__)


class Splice(tuple):
    """Group of indices flattened into the surrounding ``pluck`` path."""


def splice(indices) -> Splice:
    return Splice(indices)


@dataclass(frozen=True)
class AttrGetter:
    """Accessor returning one attribute of its argument, or ``None``.

    Matching is exact: ``AttrGetter("label")`` does not see a ``labels``
    attribute.
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise InvalidIndex(f"Attribute name must be a string, not {type(self.name).__name__}")

    def __call__(self, value: object) -> object:
        return attributes_of(value).get(self.name)


def attr_getter(name: str) -> AttrGetter:
    return AttrGetter(name)


def _flatten(indices: tuple[object, ...]) -> list[object]:
    flat: list[object] = []
    for index in indices:
        if isinstance(index, Splice):
            flat.extend(_flatten(tuple(index)))
        else:
            flat.append(index)
    return flat


def pluck(x: object, *indices: object, default: object = None) -> object:
    """Follow ``indices`` into ``x``.

    Positions are 1-based, names are strings and callables are accessors. The
    walk stops at the first index that doesn't resolve (or the first accessor
    returning ``None``) and returns ``default``; later indices are never
    looked at. Malformed indices and unindexable containers raise.
    """
    value = x
    for level, index in enumerate(_flatten(indices), start=1):
        value = get_step(value, index, level=level)
        if value is ABSENT or value is None:
            logger.debug("pluck stopped at level %d on index %r", level, index)
            return default
    return value
