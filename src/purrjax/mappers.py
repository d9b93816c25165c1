"""Helpers the core operations are built on: map, callable coercion, recycling and depth."""

from __future__ import annotations

import logging
import numbers
from typing import Callable

from .errors import LengthMismatch, PurrTypeError
from .extract import pluck
from .values import NA, Vector, VectorKind, elements_of, length_of, names_of, vector

logger = logging.getLogger(__name__)


def map_elements(x: object, fn, *args, **kwargs) -> list[object]:
    """Apply ``fn`` to every element of ``x`` and collect the results in a list."""
    fn = as_callable(fn)
    return [fn(item, *args, **kwargs) for item in elements_of(x, operation="map")]


def _is_path_part(value: object) -> bool:
    return value is NA or isinstance(value, str) or (isinstance(value, numbers.Real) and not isinstance(value, bool))


def as_callable(spec: object, *, default: object = None) -> Callable:
    """Turn ``spec`` into a function.

    Callables are returned unchanged. A name, a position or a sequence of
    them becomes an extractor that plucks that path from its argument.
    """
    if callable(spec):
        return spec

    if _is_path_part(spec):
        path = (spec,)
    elif isinstance(spec, Vector) and spec.kind is not VectorKind.LIST:
        path = tuple(spec)
    elif isinstance(spec, (list, tuple)) and spec and all(_is_path_part(p) for p in spec):
        path = tuple(spec)
    else:
        raise PurrTypeError(f"Can't convert {type(spec).__name__} to a function")

    def extractor(x, *_args, **_kwargs):
        return pluck(x, *path, default=default)

    extractor.__name__ = f"pluck{path!r}"
    return extractor


def recycle(a: list[object], b: list[object]) -> tuple[list[object], list[object]]:
    """Extend the shorter of ``a`` and ``b`` by repetition to the other's length.

    Lengths must be equal, or the shorter must divide the longer.
    """
    n_a, n_b = len(a), len(b)
    if n_a == n_b:
        return list(a), list(b)
    short, long = sorted((n_a, n_b))
    if short == 0 or long % short:
        raise LengthMismatch(f"Can't recycle length {n_a} and length {n_b} to a common length")
    logger.debug("recycling lengths %d and %d to %d", n_a, n_b, long)
    reps = long // short
    if n_a < n_b:
        return list(a) * reps, list(b)
    return list(a), list(b) * reps


def is_list_like(x: object) -> bool:
    if isinstance(x, Vector):
        return x.kind is VectorKind.LIST
    return isinstance(x, (list, tuple, dict))


def nesting_depth(x: object) -> int:
    """Levels of list nesting: ``None`` is 0, atomic values are 1."""
    if x is None:
        return 0
    if not is_list_like(x):
        return 1
    items = elements_of(x)
    if not items:
        return 1
    return 1 + max(nesting_depth(item) for item in items)


def vec_index(x: object) -> object:
    """Names of ``x`` when it has them, otherwise its 1-based positions."""
    names = names_of(x)
    if names is not None:
        return vector(names, VectorKind.CHARACTER)
    return vector(range(1, length_of(x, operation="index") + 1), VectorKind.INTEGER)
