"""Runtime value model: vectors, records, environments and container kinds."""

from __future__ import annotations

import dataclasses
import math
import numbers
from collections.abc import Iterator, Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import SimpleNamespace
from typing import Final

import jax
import jax.numpy as jnp

from .errors import CoercionError, LengthMismatch, UnsupportedContainer


class _NAType:
    """Missing scalar. Never equal to a name and never a valid position."""

    _instance: "_NAType | None" = None

    def __new__(cls) -> "_NAType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NA"

    def __reduce__(self):
        return (_NAType, ())


NA: Final = _NAType()


def is_missing(value: object) -> bool:
    return value is None or value is NA


class VectorKind(str, Enum):
    LOGICAL = "logical"
    INTEGER = "integer"
    DOUBLE = "double"
    CHARACTER = "character"
    LIST = "list"


class ContainerKind(str, Enum):
    SEQUENCE = "sequence"
    RECORD = "record"
    SCOPE = "scope"
    ACCESSOR = "accessor"
    UNSUPPORTED = "unsupported"


_ARRAY_KINDS: Final[frozenset[VectorKind]] = frozenset({VectorKind.LOGICAL, VectorKind.INTEGER, VectorKind.DOUBLE})
_NUMERIC_RANK: Final[dict[VectorKind, int]] = {VectorKind.LOGICAL: 0, VectorKind.INTEGER: 1, VectorKind.DOUBLE: 2}
_ARRAY_DTYPES: Final[dict[VectorKind, type]] = {VectorKind.LOGICAL: bool, VectorKind.INTEGER: int, VectorKind.DOUBLE: float}


@dataclass(frozen=True, eq=False)
class Vector:
    """Homogeneous sequence with optional parallel names and an attribute side-table.

    Logical, integer and double vectors store their elements in a 1-d JAX
    array; character and list vectors store a tuple.
    """

    kind: VectorKind
    data: object
    names: tuple[str | None, ...] | None = None
    attrs: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind in _ARRAY_KINDS:
            if not isinstance(self.data, jax.Array) or self.data.ndim != 1:
                raise TypeError(f"{self.kind.value} vector data must be a rank-1 jax array")
        elif not isinstance(self.data, tuple):
            object.__setattr__(self, "data", tuple(self.data))
        if self.names is not None:
            names = tuple(self.names)
            if len(names) != len(self):
                raise LengthMismatch(f"names has length {len(names)}, vector has length {len(self)}")
            object.__setattr__(self, "names", names)
        object.__setattr__(self, "attrs", dict(self.attrs))

    def __len__(self) -> int:
        if self.kind in _ARRAY_KINDS:
            return int(self.data.shape[0])
        return len(self.data)

    def __iter__(self) -> Iterator[object]:
        for position in range(len(self)):
            yield self.element(position)

    def element(self, position: int) -> object:
        return self.data[position]

    def assign(self, position: int, value: object) -> "Vector":
        cell = coerce_element(value, self.kind, position=position)
        if self.kind in _ARRAY_KINDS:
            data = self.data.at[position].set(cell)
        else:
            items = list(self.data)
            items[position] = cell
            data = tuple(items)
        return dataclasses.replace(self, data=data)

    def tolist(self) -> list[object]:
        if self.kind in _ARRAY_KINDS:
            return self.data.tolist()
        return list(self.data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        if self.kind is not other.kind or self.names != other.names or len(self) != len(other):
            return False
        if not _mappings_equal(self.attrs, other.attrs):
            return False
        if self.kind in _ARRAY_KINDS:
            return bool(jnp.array_equal(self.data, other.data))
        return all(values_equal(a, b) for a, b in zip(self.data, other.data, strict=True))

    __hash__ = None

    def __repr__(self) -> str:
        names = "" if self.names is None else f", names={list(self.names)!r}"
        return f"Vector({self.kind.value}, {self.tolist()!r}{names})"


class Record:
    """Fixed set of named slots. Slots are read by name only."""

    def __init__(self, slots: Mapping[str, object] | None = None, /, **values: object) -> None:
        merged = dict(slots or {})
        merged.update(values)
        self._slots = merged

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._slots[name]
        except KeyError:
            raise AttributeError(name) from None

    @property
    def slot_names(self) -> tuple[str, ...]:
        return tuple(self._slots)

    def slots(self) -> dict[str, object]:
        return dict(self._slots)

    def replace(self, **changes: object) -> "Record":
        unknown = set(changes) - set(self._slots)
        if unknown:
            raise AttributeError(f"Record has no slots {sorted(unknown)}")
        return Record(self._slots, **changes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return _mappings_equal(self._slots, other._slots) and self.slot_names == other.slot_names

    __hash__ = None

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._slots.items())
        return f"Record({inner})"


class Environment(MutableMapping[str, object]):
    """Mutable name-keyed scope.

    Item access walks the parent chain; ``lookup_local`` (used by ``pluck``)
    only consults this frame.
    """

    def __init__(self, data: Mapping[str, object] | None = None, parent: "Environment | None" = None, **values: object) -> None:
        self._data: dict[str, object] = dict(data or {})
        self._data.update(values)
        self.parent = parent
        self.attrs: dict[str, object] = {}

    def __getitem__(self, key: str) -> object:
        scope: Environment | None = self
        while scope is not None:
            if key in scope._data:
                return scope._data[key]
            scope = scope.parent
        raise KeyError(key)

    def __setitem__(self, key: str, value: object) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def lookup_local(self, key: str, default: object = None) -> object:
        return self._data.get(key, default)

    def __repr__(self) -> str:
        return f"Environment({self._data!r})"


def is_record(value: object) -> bool:
    if isinstance(value, Record):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type) and not isinstance(value, Vector)


def container_kind(value: object) -> ContainerKind:
    if value is None or value is NA or isinstance(value, (Vector, list, tuple, dict, str, bool)):
        return ContainerKind.SEQUENCE
    if isinstance(value, (Environment, SimpleNamespace)):
        return ContainerKind.SCOPE
    if is_record(value):
        return ContainerKind.RECORD
    if isinstance(value, jax.Array):
        if jnp.issubdtype(value.dtype, jnp.complexfloating):
            return ContainerKind.UNSUPPORTED
        return ContainerKind.SEQUENCE
    if isinstance(value, numbers.Real):
        return ContainerKind.SEQUENCE
    if callable(value):
        return ContainerKind.ACCESSOR
    return ContainerKind.UNSUPPORTED


def type_name(value: object) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, Vector):
        return value.kind.value
    if isinstance(value, complex):
        return "complex"
    if isinstance(value, jax.Array):
        if jnp.issubdtype(value.dtype, jnp.complexfloating):
            return "complex"
        kind = kind_for_dtype(value.dtype)
        return kind.value if kind is not None else str(value.dtype)
    if isinstance(value, bool):
        return "logical"
    if isinstance(value, numbers.Integral):
        return "integer"
    if isinstance(value, numbers.Real):
        return "double"
    if isinstance(value, str):
        return "character"
    if isinstance(value, (list, tuple, dict)):
        return "list"
    if callable(value):
        return "function"
    return type(value).__name__


def kind_for_dtype(dtype) -> VectorKind | None:
    if jnp.issubdtype(dtype, jnp.bool_):
        return VectorKind.LOGICAL
    if jnp.issubdtype(dtype, jnp.integer):
        return VectorKind.INTEGER
    if jnp.issubdtype(dtype, jnp.floating):
        return VectorKind.DOUBLE
    return None


def _scalar_kind(value: object) -> VectorKind | None:
    if isinstance(value, bool):
        return VectorKind.LOGICAL
    if isinstance(value, str):
        return VectorKind.CHARACTER
    if isinstance(value, jax.Array):
        if value.ndim != 0:
            return None
        return kind_for_dtype(value.dtype)
    if isinstance(value, numbers.Integral):
        return VectorKind.INTEGER
    if isinstance(value, numbers.Real):
        return VectorKind.DOUBLE
    return None


def _atomic_scalar(value: object) -> object:
    if isinstance(value, jax.Array) and value.ndim == 0:
        return value.item()
    if isinstance(value, Vector) and value.kind is not VectorKind.LIST and len(value) == 1:
        return _atomic_scalar(value.element(0))
    return value


def coerce_element(value: object, kind: VectorKind, *, position: int = 0) -> object:
    """Fit ``value`` into a cell of a ``kind`` vector, or raise ``CoercionError``.

    Array kinds get Python scalars back so that ``.at[].set`` never has to
    cast between dtypes.
    """
    if kind is VectorKind.LIST:
        return value

    scalar = _atomic_scalar(value)
    if kind is VectorKind.CHARACTER:
        if isinstance(scalar, str) or is_missing(scalar):
            return NA if scalar is None else scalar
    elif kind is VectorKind.LOGICAL:
        if isinstance(scalar, bool):
            return scalar
    elif kind is VectorKind.INTEGER:
        if isinstance(scalar, bool):
            return int(scalar)
        if isinstance(scalar, numbers.Integral):
            return int(scalar)
    elif kind is VectorKind.DOUBLE:
        if scalar is NA:
            return math.nan
        if isinstance(scalar, numbers.Real):
            return float(scalar)

    raise CoercionError(f"Can't coerce element {position + 1} from a {type_name(value)} to a {kind.value}")


def infer_kind(values: Sequence[object]) -> VectorKind:
    """Common atomic kind of ``values``, or ``LIST`` when they don't share one."""
    has_missing = any(v is NA for v in values)
    kinds = {_scalar_kind(v) for v in values if v is not NA}
    if not kinds or None in kinds:
        return VectorKind.LIST
    if kinds == {VectorKind.CHARACTER}:
        return VectorKind.CHARACTER
    if VectorKind.CHARACTER in kinds:
        return VectorKind.LIST
    kind = max(kinds, key=_NUMERIC_RANK.__getitem__)
    if has_missing and kind is not VectorKind.DOUBLE:
        return VectorKind.LIST
    return kind


def vector(
    values: Sequence[object] = (),
    kind: VectorKind | str | None = None,
    *,
    names: Sequence[str | None] | None = None,
    attrs: Mapping[str, object] | None = None,
) -> Vector:
    """Build a ``Vector``, inferring the kind from the values when not given."""
    values = list(values)
    kind = infer_kind(values) if kind is None else VectorKind(kind)
    cells = [coerce_element(v, kind, position=i) for i, v in enumerate(values)]
    if kind in _ARRAY_KINDS:
        data = jnp.asarray(cells, dtype=_ARRAY_DTYPES[kind])
    else:
        data = tuple(cells)
    return Vector(kind=kind, data=data, names=None if names is None else tuple(names), attrs=attrs or {})


def named_vector(mapping: Mapping[str, object], kind: VectorKind | str | None = None) -> Vector:
    return vector(list(mapping.values()), kind, names=list(mapping.keys()))


def as_vector(value: object) -> Vector:
    if isinstance(value, Vector):
        return value
    if value is None:
        return vector((), VectorKind.LIST)
    if isinstance(value, dict):
        return vector(list(value.values()), VectorKind.LIST, names=list(value.keys()))
    if isinstance(value, (list, tuple)):
        return vector(value, VectorKind.LIST)
    if isinstance(value, jax.Array):
        flat = jnp.reshape(value, (-1,)) if value.ndim == 0 else value
        kind = kind_for_dtype(flat.dtype)
        if kind is None or flat.ndim != 1:
            return vector(list(flat), VectorKind.LIST)
        return Vector(kind=kind, data=flat)
    return vector([value])


def with_attrs(value: object, **attrs: object) -> object:
    """Attach attributes, promoting plain values to a ``Vector`` first."""
    if isinstance(value, Environment):
        value.attrs.update(attrs)
        return value
    vec = as_vector(value)
    merged = dict(vec.attrs)
    merged.update(attrs)
    return dataclasses.replace(vec, attrs=merged)


def attributes_of(value: object) -> dict[str, object]:
    if isinstance(value, Vector):
        out = dict(value.attrs)
        if value.names is not None:
            out["names"] = vector(value.names, VectorKind.CHARACTER)
        return out
    if isinstance(value, Record):
        return value.slots()
    if is_record(value):
        return {name: getattr(value, name) for name in _record_names(value)}
    if isinstance(value, Environment):
        return dict(value.attrs)
    if isinstance(value, SimpleNamespace):
        return dict(vars(value))
    return {}


# Sequence/record protocol --------------------------------------------------


def _require_positional(value: object, *, operation: str) -> ContainerKind:
    kind = container_kind(value)
    if kind not in (ContainerKind.SEQUENCE, ContainerKind.RECORD):
        raise UnsupportedContainer(type_name(value), operation=operation)
    return kind


def _record_names(value: object) -> tuple[str, ...]:
    if isinstance(value, Record):
        return value.slot_names
    return tuple(f.name for f in dataclasses.fields(value))


def length_of(value: object, *, operation: str = "index") -> int:
    if _require_positional(value, operation=operation) is ContainerKind.RECORD:
        return len(_record_names(value))
    if value is None:
        return 0
    if isinstance(value, (Vector, list, tuple, dict)):
        return len(value)
    if isinstance(value, jax.Array) and value.ndim > 0:
        return int(value.shape[0])
    return 1


def names_of(value: object) -> tuple[str | None, ...] | None:
    if isinstance(value, Vector):
        return value.names
    if isinstance(value, dict):
        return tuple(k if isinstance(k, str) else None for k in value)
    if is_record(value):
        return _record_names(value)
    return None


def element_at(value: object, position: int) -> object:
    """Element at 0-based ``position``; the caller guarantees it is in range."""
    if isinstance(value, Vector):
        return value.element(position)
    if isinstance(value, (list, tuple)):
        return value[position]
    if isinstance(value, dict):
        return list(value.values())[position]
    if is_record(value):
        return getattr(value, _record_names(value)[position])
    if isinstance(value, jax.Array) and value.ndim > 0:
        return value[position]
    return value


def elements_of(value: object, *, operation: str = "index") -> list[object]:
    return [element_at(value, i) for i in range(length_of(value, operation=operation))]


def assign_element(value: object, position: int, new: object) -> object:
    """Copy of ``value`` with the element at 0-based ``position`` replaced.

    The result keeps the container's kind; values that don't fit raise
    ``CoercionError``.
    """
    kind = _require_positional(value, operation="modify")
    if kind is ContainerKind.RECORD:
        name = _record_names(value)[position]
        if isinstance(value, Record):
            return value.replace(**{name: new})
        return dataclasses.replace(value, **{name: new})

    if isinstance(value, Vector):
        return value.assign(position, new)
    if isinstance(value, list):
        out = list(value)
        out[position] = new
        return out
    if isinstance(value, tuple):
        out = list(value)
        out[position] = new
        return tuple(out)
    if isinstance(value, dict):
        out = dict(value)
        out[list(value)[position]] = new
        return out
    if isinstance(value, jax.Array):
        return _assign_array(value, position, new)

    scalar_kind = _scalar_kind(value)
    if scalar_kind is None:
        raise UnsupportedContainer(type_name(value), operation="modify")
    return coerce_element(new, scalar_kind, position=position)


def _assign_array(arr: jax.Array, position: int, new: object) -> jax.Array:
    kind = kind_for_dtype(arr.dtype)
    if arr.ndim <= 1:
        cell = coerce_element(new, kind, position=position)
        if arr.ndim == 0:
            return jnp.asarray(cell, dtype=arr.dtype)
        return arr.at[position].set(cell)

    row = jnp.asarray(new)
    row_kind = kind_for_dtype(row.dtype)
    if row.shape != arr.shape[1:] or row_kind is None or _NUMERIC_RANK[row_kind] > _NUMERIC_RANK[kind]:
        raise CoercionError(
            f"Can't coerce element {position + 1} of shape {row.shape} to a {kind.value} cell of shape {arr.shape[1:]}"
        )
    return arr.at[position].set(row.astype(arr.dtype))


def resize(value: object, length: int) -> object:
    """Repeat the elements (and names) of ``value`` cyclically up to ``length``."""
    current = length_of(value, operation="recycle")
    if current == length:
        return value
    if current == 0 or isinstance(value, dict) or is_record(value):
        raise LengthMismatch(f"Can't recycle {type_name(value)} of length {current} to length {length}")

    reps = -(-length // current)
    if isinstance(value, Vector):
        if value.kind in _ARRAY_KINDS:
            data = jnp.tile(value.data, reps)[:length]
        else:
            data = (value.data * reps)[:length]
        names = None if value.names is None else (value.names * reps)[:length]
        return dataclasses.replace(value, data=data, names=names)
    if isinstance(value, list):
        return (value * reps)[:length]
    if isinstance(value, tuple):
        return tuple((list(value) * reps)[:length])
    if isinstance(value, jax.Array):
        if value.ndim == 0:
            return jnp.full((length,), value)
        return jnp.concatenate([value] * reps, axis=0)[:length]
    return vector([value] * length)


# Equality ------------------------------------------------------------------


def _is_arraylike(value: object) -> bool:
    return isinstance(value, (jax.Array, numbers.Number)) and not isinstance(value, Vector)


def values_equal(left: object, right: object) -> bool:
    """Structural equality that understands JAX arrays nested in containers."""
    if isinstance(left, jax.Array) or isinstance(right, jax.Array):
        if not (_is_arraylike(left) and _is_arraylike(right)):
            return False
        l_arr = jnp.asarray(left)
        r_arr = jnp.asarray(right)
        return l_arr.shape == r_arr.shape and bool(jnp.array_equal(l_arr, r_arr))
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if type(left) is not type(right) or len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right, strict=True))
    if isinstance(left, dict) and isinstance(right, dict):
        return list(left) == list(right) and _mappings_equal(left, right)
    return bool(left == right)


def _mappings_equal(left: Mapping[str, object], right: Mapping[str, object]) -> bool:
    if set(left) != set(right):
        return False
    return all(values_equal(left[k], right[k]) for k in left)
