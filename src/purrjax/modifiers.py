"""Kind-preserving selective transformation.

Unlike ``map_elements``, which always returns a list, every function here
returns a container of the same kind as its input: an integer ``Vector``
stays an integer ``Vector``, a ``dict`` stays a ``dict``, a ``Record`` stays
a ``Record``. Replacement values that do not fit the container raise
``CoercionError``.

For any supported ``x`` the functor laws hold::

    modify(x, identity) == x
    modify(x, compose(f, g)) == modify(modify(x, g), f)
"""

from __future__ import annotations

import logging
import math
import numbers
import warnings

import jax

from .errors import InsufficientDepth, InvalidDepth, InvalidIndex, LengthMismatch, NoNamesError
from .mappers import as_callable, is_list_like, nesting_depth, recycle, vec_index
from .values import (
    Vector,
    VectorKind,
    assign_element,
    coerce_element,
    elements_of,
    length_of,
    names_of,
    resize,
)

logger = logging.getLogger(__name__)


def modify(x: object, fn, *args, **kwargs) -> object:
    """Replace every element of ``x`` with ``fn(element, *args, **kwargs)``."""
    fn = as_callable(fn)
    out = x
    for position, item in enumerate(elements_of(x, operation="modify")):
        out = assign_element(out, position, fn(item, *args, **kwargs))
    return out


def _is_mask(p: object) -> bool:
    if isinstance(p, Vector):
        return p.kind is VectorKind.LOGICAL
    if isinstance(p, jax.Array):
        return p.dtype == bool
    if isinstance(p, (list, tuple)):
        return all(isinstance(v, bool) for v in p)
    return False


def probe(x: object, p: object) -> list[bool]:
    """Selection mask for ``x``: ``p`` itself when it is a boolean mask, else ``p`` applied per element."""
    items = elements_of(x, operation="modify")
    if _is_mask(p):
        mask = [bool(v) for v in (p.tolist() if isinstance(p, (Vector, jax.Array)) else p)]
        if len(mask) != len(items):
            raise LengthMismatch(f"Predicate mask has length {len(mask)}, expected {len(items)}")
        return mask

    p = as_callable(p)
    return [coerce_element(p(item), VectorKind.LOGICAL, position=i) for i, item in enumerate(items)]


def modify_if(x: object, p: object, fn, *args, **kwargs) -> object:
    """Like ``modify`` but only for the elements selected by predicate or mask ``p``."""
    fn = as_callable(fn)
    selected = probe(x, p)
    out = x
    for position, (item, hit) in enumerate(zip(elements_of(x, operation="modify"), selected, strict=True)):
        if hit:
            out = assign_element(out, position, fn(item, *args, **kwargs))
    return out


def _selector_values(at: object) -> list[object]:
    if isinstance(at, (str, numbers.Real)) and not isinstance(at, bool):
        return [at]
    if isinstance(at, Vector):
        return at.tolist()
    if isinstance(at, jax.Array):
        return at.reshape((-1,)).tolist()
    if isinstance(at, (list, tuple, set, frozenset)):
        return list(at)
    raise InvalidIndex(f"Unrecognised index type {type(at).__name__}")


def selection_mask(x: object, at: object) -> list[bool]:
    """Mask selecting the names or 1-based positions in ``at``.

    All-negative positions select everything except those positions.
    """
    size = length_of(x, operation="modify")
    selector = _selector_values(at)
    if not selector:
        return [False] * size

    if all(isinstance(v, str) for v in selector):
        names = names_of(x)
        if names is None:
            raise NoNamesError("character indexing requires a named object")
        wanted = set(selector)
        return [isinstance(name, str) and name in wanted for name in names]

    if all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in selector):
        positions = {int(v) for v in selector if math.isfinite(v)}
        if any(p < 0 for p in positions):
            if any(p > 0 for p in positions):
                raise InvalidIndex("Can't mix positive and negative positions")
            excluded = {-p for p in positions}
            return [i not in excluded for i in range(1, size + 1)]
        return [i in positions for i in range(1, size + 1)]

    raise InvalidIndex("Unrecognised index type: expected names or positions")


def modify_at(x: object, at: object, fn, *args, **kwargs) -> object:
    """Like ``modify`` but only for the elements named or positioned in ``at``."""
    return modify_if(x, selection_mask(x, at), fn, *args, **kwargs)


def modify2(x: object, y: object, fn, *args, **kwargs) -> object:
    """Replace each element of ``x`` with ``fn(x_i, y_i)`` after recycling both to a common length."""
    fn = as_callable(fn)
    items, others = recycle(elements_of(x, operation="modify"), elements_of(y, operation="modify"))
    out = resize(x, len(items))
    for position, (item, other) in enumerate(zip(items, others, strict=True)):
        out = assign_element(out, position, fn(item, other, *args, **kwargs))
    return out


def imodify(x: object, fn, *args, **kwargs) -> object:
    """``modify2`` against the names of ``x``, or its 1-based positions when unnamed."""
    return modify2(x, vec_index(x).tolist(), fn, *args, **kwargs)


def _as_depth(depth: object) -> int:
    if isinstance(depth, jax.Array) and depth.ndim == 0:
        depth = depth.item()
    if isinstance(depth, bool) or not isinstance(depth, numbers.Real):
        raise InvalidDepth("`depth` must be a single integer")
    if isinstance(depth, numbers.Integral):
        return int(depth)
    if float(depth).is_integer():
        return int(depth)
    raise InvalidDepth("`depth` must be a single integer")


def _modify_depth_rec(x: object, depth: int, fn, args: tuple, kwargs: dict, ragged: bool) -> object:
    if depth < 0:
        raise InvalidDepth("Invalid `depth`")
    if depth == 0:
        return fn(x, *args, **kwargs)
    if not is_list_like(x):
        if depth > 1 and isinstance(x, (Vector, jax.Array)) and length_of(x) > 1:
            return modify(x, lambda child: _modify_depth_rec(child, depth - 1, fn, args, kwargs, ragged))
        if ragged:
            return fn(x, *args, **kwargs)
        raise InsufficientDepth("List not deep enough")
    if depth == 1:
        return modify(x, fn, *args, **kwargs)
    return modify(x, lambda child: _modify_depth_rec(child, depth - 1, fn, args, kwargs, ragged))


def modify_depth(x: object, depth: int, fn, *args, ragged: bool | None = None, **kwargs) -> object:
    """Apply ``fn`` to the elements at nesting level ``depth`` of ``x``.

    Level 0 is ``x`` itself, level 1 its children and so on. Negative depths
    count up from the deepest leaf. With ``ragged`` (the default for negative
    depths) leaves reached above the target level get ``fn`` applied instead
    of raising ``InsufficientDepth``.
    """
    depth = _as_depth(depth)
    if ragged is None:
        ragged = depth < 0
    if depth < 0:
        resolved = nesting_depth(x) + depth
        logger.debug("resolved depth %d to %d", depth, resolved)
        depth = resolved
    fn = as_callable(fn)
    return _modify_depth_rec(x, depth, fn, args, kwargs, ragged)


def at_depth(x: object, depth: int, fn, *args, **kwargs) -> object:
    warnings.warn(
        "at_depth() is deprecated, please use `modify_depth()` instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return modify_depth(x, depth, fn, *args, **kwargs)
