"""Structured error types for indexing, reduction and modification."""

from __future__ import annotations

from dataclasses import dataclass


class PurrError(Exception):
    """Base class for structured purrjax errors."""


class PurrTypeError(PurrError):
    """Value-kind or index-kind compatibility failure."""


class PurrShapeError(PurrError):
    """Length, arity or depth compatibility failure."""


class InvalidIndex(PurrTypeError):
    """Index is not a single position, name or accessor, or has the wrong kind for its container."""


@dataclass(eq=False)
class UnsupportedContainer(PurrTypeError):
    """Container kind has no defined behaviour for the requested operation."""

    type_name: str
    level: int | None = None
    operation: str = "index"

    def __str__(self) -> str:
        where = "" if self.level is None else f" at level {self.level}"
        return f"Don't know how to {self.operation} object of type {self.type_name}{where}"


class NoNamesError(PurrTypeError):
    """Name-based selection on an object without names."""


class CoercionError(PurrTypeError):
    """Element assignment received a value that does not fit the container's element kind."""


class EmptyReduce(PurrShapeError):
    """Reduction of an empty sequence without a seed."""


class LengthMismatch(PurrShapeError):
    """Paired sequences or masks have incompatible lengths."""


class InsufficientDepth(PurrShapeError):
    """Nested structure is shallower than the requested depth."""


class InvalidDepth(PurrShapeError):
    """Depth is not an integer or resolves below zero."""
