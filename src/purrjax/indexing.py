"""Single-step access into sequences, records and scopes."""

from __future__ import annotations

import math
import numbers
from types import SimpleNamespace
from typing import Final

import jax

from .errors import InvalidIndex, UnsupportedContainer
from .values import (
    NA,
    ContainerKind,
    Environment,
    Record,
    Vector,
    container_kind,
    element_at,
    is_missing,
    length_of,
    names_of,
    type_name,
)


class _AbsentType:
    """An index that did not resolve. Distinct from ``None`` and from errors."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Final = _AbsentType()


def _single(index: object, *, level: int) -> object:
    if isinstance(index, (list, tuple, Vector)):
        if len(index) != 1:
            raise InvalidIndex(f"Index {level} must have length 1")
        return _single(index[0] if not isinstance(index, Vector) else index.element(0), level=level)
    if isinstance(index, jax.Array):
        if index.size != 1:
            raise InvalidIndex(f"Index {level} must have length 1")
        return index.reshape(()).item()
    return index


def position_or_name(index: object, *, level: int = 1) -> object:
    """Reduce ``index`` to a real position, a name or ``NA``."""
    index = _single(index, level=level)
    if is_missing(index):
        return NA
    if isinstance(index, bool) or not isinstance(index, (str, numbers.Real)):
        raise InvalidIndex(f"Index {level} must be a character or numeric vector")
    return index


def _sequence_step(container: object, index: object, *, level: int) -> object:
    index = position_or_name(index, level=level)
    if index is NA:
        return ABSENT

    if isinstance(index, str):
        names = names_of(container)
        if names is None or index == "":
            return ABSENT
        for position, name in enumerate(names):
            if isinstance(name, str) and name == index:
                return element_at(container, position)
        return ABSENT

    if not math.isfinite(index):
        return ABSENT
    position = int(index)
    if position <= 0 or position > length_of(container):
        return ABSENT
    return element_at(container, position - 1)


def _slot_step(container: object, index: object, *, level: int) -> object:
    if isinstance(index, (list, tuple, Vector)) and len(index) == 1:
        index = _single(index, level=level)
    elif isinstance(index, jax.Array) and index.size == 1:
        index = _single(index, level=level)
    if is_missing(index):
        return ABSENT
    if not isinstance(index, str):
        raise InvalidIndex(f"Index {level} is not a string")

    if isinstance(container, Environment):
        return container.lookup_local(index, ABSENT)
    if isinstance(container, SimpleNamespace):
        return vars(container).get(index, ABSENT)
    if isinstance(container, Record):
        return container.slots().get(index, ABSENT)
    if index in names_of(container):
        return getattr(container, index)
    return ABSENT


def get_step(container: object, index: object, *, level: int = 1) -> object:
    """Resolve one index against ``container``; ``ABSENT`` when it doesn't match.

    Callable indices are accessors and are called with the container. Their
    errors propagate.
    """
    if callable(index):
        return index(container)

    kind = container_kind(container)
    if kind is ContainerKind.SEQUENCE:
        return _sequence_step(container, index, level=level)
    if kind in (ContainerKind.RECORD, ContainerKind.SCOPE):
        return _slot_step(container, index, level=level)
    raise UnsupportedContainer(type_name(container), level=level)
