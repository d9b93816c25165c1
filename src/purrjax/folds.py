"""Left and right folds, paired folds and running accumulations."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

import jax
import jax.numpy as jnp

from .errors import EmptyReduce, LengthMismatch
from .mappers import as_callable
from .values import Vector, elements_of, is_record, names_of, vector

_MISSING: Final = object()
_INIT_NAME: Final[str] = ".init"


def _empty_error() -> EmptyReduce:
    return EmptyReduce("`x` is empty, and no `init` supplied")


def reduce(x: object, fn, *args, init: object = _MISSING, **kwargs) -> object:
    """Fold ``x`` from the left: ``fn(fn(x1, x2), x3)``.

    ``init`` seeds the fold. A single element without a seed is returned
    as is, without calling ``fn``.
    """
    fn = as_callable(fn)
    items = elements_of(x, operation="reduce")
    if init is not _MISSING:
        items.insert(0, init)
    if not items:
        raise _empty_error()

    acc = items[0]
    for item in items[1:]:
        acc = fn(acc, item, *args, **kwargs)
    return acc


def reduce_right(x: object, fn, *args, init: object = _MISSING, **kwargs) -> object:
    """Fold ``x`` from the right: ``fn(x1, fn(x2, x3))``, ``init`` as the rightmost seed."""
    fn = as_callable(fn)
    items = elements_of(x, operation="reduce")
    if init is not _MISSING:
        items.append(init)
    if not items:
        raise _empty_error()

    acc = items[-1]
    for item in reversed(items[:-1]):
        acc = fn(item, acc, *args, **kwargs)
    return acc


def _paired(x: object, y: object, init: object) -> tuple[list[object], list[object]]:
    items = elements_of(x, operation="reduce")
    others = elements_of(y, operation="reduce")
    if init is _MISSING and not items:
        raise _empty_error()
    expected = len(items) if init is not _MISSING else len(items) - 1
    if len(others) != expected:
        raise LengthMismatch(f"`y` does not have length {expected}")
    return items, others


def reduce2(x: object, y: object, fn, *args, init: object = _MISSING, **kwargs) -> object:
    """Left fold over ``x`` that also passes the matching element of ``y``: ``fn(acc, x_i, y_i)``.

    ``y`` has one element per call of ``fn``: ``len(x) - 1`` without a seed,
    ``len(x)`` with one.
    """
    fn = as_callable(fn)
    items, others = _paired(x, y, init)
    if init is _MISSING:
        acc, rest = items[0], items[1:]
    else:
        acc, rest = init, items

    for item, other in zip(rest, others, strict=True):
        acc = fn(acc, item, other, *args, **kwargs)
    return acc


def reduce2_right(x: object, y: object, fn, *args, init: object = _MISSING, **kwargs) -> object:
    fn = as_callable(fn)
    items, others = _paired(x, y, init)
    if init is _MISSING:
        acc, rest = items[-1], items[:-1]
    else:
        acc, rest = init, items

    for item, other in reversed(list(zip(rest, others, strict=True))):
        acc = fn(item, acc, other, *args, **kwargs)
    return acc


def iter_accumulate(x: object, fn, *args, init: object = _MISSING, **kwargs) -> Iterator[object]:
    """Lazily yield the partial results of a left fold, the seed first when given."""
    fn = as_callable(fn)
    items = elements_of(x, operation="accumulate")
    if init is not _MISSING:
        items.insert(0, init)
    if not items:
        return

    acc = items[0]
    yield acc
    for item in items[1:]:
        acc = fn(acc, item, *args, **kwargs)
        yield acc


def _input_names(x: object) -> list[object] | None:
    if isinstance(x, dict):
        return list(x)
    names = names_of(x)
    return None if names is None else list(names)


def _pack_like(x: object, values: list[object], names: list[object] | None) -> object:
    if isinstance(x, dict):
        return dict(zip(names or [], values, strict=True))
    if isinstance(x, Vector) or is_record(x):
        return vector(values, names=names)
    if isinstance(x, tuple):
        return tuple(values)
    if isinstance(x, jax.Array) and values:
        if all(isinstance(v, jax.Array) for v in values):
            first_shape = values[0].shape
            if all(v.shape == first_shape for v in values):
                return jnp.stack(values, axis=0)
    return list(values)


def accumulate(x: object, fn, *args, init: object = _MISSING, **kwargs) -> object:
    """Every partial result of ``reduce(x, fn, init=init)``, in the container family of ``x``.

    Output names follow the element that produced each result; the seed is
    named ``".init"``.
    """
    values = list(iter_accumulate(x, fn, *args, init=init, **kwargs))
    names = _input_names(x)
    if names is not None and init is not _MISSING:
        names.insert(0, _INIT_NAME)
    return _pack_like(x, values, names)


def accumulate_right(x: object, fn, *args, init: object = _MISSING, **kwargs) -> object:
    """Every partial result of ``reduce_right``; position *i* folds elements *i* to the end.

    Input names come out reversed, with the seed named ``".init"`` last.
    """
    fn = as_callable(fn)
    items = elements_of(x, operation="accumulate")
    if init is not _MISSING:
        items.append(init)

    values: list[object] = []
    if items:
        acc = items[-1]
        values.append(acc)
        for item in reversed(items[:-1]):
            acc = fn(item, acc, *args, **kwargs)
            values.append(acc)
        values.reverse()

    names = _input_names(x)
    if names is not None:
        names.reverse()
        if init is not _MISSING:
            names.append(_INIT_NAME)
    return _pack_like(x, values, names)
