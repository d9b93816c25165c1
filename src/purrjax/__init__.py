"""purrjax public API."""

from .logger import logger, setup_logger
from .errors import (
    CoercionError,
    EmptyReduce,
    InsufficientDepth,
    InvalidDepth,
    InvalidIndex,
    LengthMismatch,
    NoNamesError,
    PurrError,
    PurrShapeError,
    PurrTypeError,
    UnsupportedContainer,
)
from .values import (
    NA,
    ContainerKind,
    Environment,
    Record,
    Vector,
    VectorKind,
    as_vector,
    attributes_of,
    container_kind,
    named_vector,
    vector,
    with_attrs,
)
from .indexing import ABSENT, get_step
from .extract import AttrGetter, attr_getter, pluck, splice
from .mappers import as_callable, map_elements, nesting_depth, recycle, vec_index
from .folds import accumulate, accumulate_right, iter_accumulate, reduce, reduce2, reduce2_right, reduce_right
from .modifiers import at_depth, imodify, modify, modify2, modify_at, modify_depth, modify_if

__all__ = [
    "pluck",
    "attr_getter",
    "AttrGetter",
    "splice",
    "get_step",
    "ABSENT",
    "reduce",
    "reduce_right",
    "reduce2",
    "reduce2_right",
    "accumulate",
    "accumulate_right",
    "iter_accumulate",
    "modify",
    "modify_if",
    "modify_at",
    "modify2",
    "imodify",
    "modify_depth",
    "at_depth",
    "map_elements",
    "as_callable",
    "recycle",
    "nesting_depth",
    "vec_index",
    "NA",
    "Vector",
    "VectorKind",
    "Record",
    "Environment",
    "ContainerKind",
    "container_kind",
    "vector",
    "named_vector",
    "as_vector",
    "with_attrs",
    "attributes_of",
    "logger",
    "setup_logger",
    "PurrError",
    "PurrTypeError",
    "PurrShapeError",
    "InvalidIndex",
    "UnsupportedContainer",
    "NoNamesError",
    "CoercionError",
    "EmptyReduce",
    "LengthMismatch",
    "InsufficientDepth",
    "InvalidDepth",
]
