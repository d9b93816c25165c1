from __future__ import annotations

import importlib.util
import math
import operator
import unittest
from dataclasses import dataclass


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@dataclass(frozen=True)
class Point:
    x: int
    y: int


def _nested_params():
    import jax.numpy as jnp

    return {
        "obj1": {
            "prop1": {"param1": jnp.asarray([1, 2]), "param2": jnp.asarray([3, 4])},
            "prop2": {"param1": jnp.asarray([5, 6]), "param2": jnp.asarray([7, 8])},
        },
        "obj2": {
            "prop1": {"param1": jnp.asarray([9, 10]), "param2": jnp.asarray([11, 12])},
            "prop2": {"param1": jnp.asarray([12, 13, 14]), "param2": jnp.asarray([15, 16, 17])},
        },
    }


def _frame():
    from purrjax import named_vector, vector

    return named_vector(
        {
            "mpg": vector([21.0, 22.8, 21.4], "double"),
            "cyl": vector([6.0, 4.0, 6.0], "double"),
            "disp": vector([160.0, 108.0, 258.0], "double"),
            "am": vector([1.0, 1.0, 0.0], "double"),
        }
    )


def _to_character(column):
    from purrjax import vector

    return vector([str(value) for value in column.tolist()], "character")


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for modify tests")
class ModifyTests(unittest.TestCase):
    def test_atomic_vectors_keep_their_kind(self) -> None:
        from purrjax import VectorKind, modify, vector

        ints = modify(vector([1, 2, 3]), lambda v: v * 2)
        self.assertIs(ints.kind, VectorKind.INTEGER)
        self.assertEqual(ints, vector([2, 4, 6], "integer"))

        doubles = modify(vector([1.5, 2.5]), lambda v: v + 1)
        self.assertEqual(doubles, vector([2.5, 3.5], "double"))

        chars = modify(vector(["a", "b"]), str.upper)
        self.assertEqual(chars, vector(["A", "B"], "character"))

        flags = modify(vector([True, False]), lambda v: not v)
        self.assertEqual(flags, vector([False, True], "logical"))

    def test_incompatible_results_raise_coercion_error(self) -> None:
        from purrjax import CoercionError, modify, vector

        with self.assertRaisesRegex(CoercionError, "Can't coerce element 1 from a double to a integer"):
            modify(vector([1, 2, 3]), lambda v: v / 2)
        with self.assertRaisesRegex(CoercionError, "to a character"):
            modify(vector(["a", "b"]), len)
        with self.assertRaises(CoercionError):
            modify(3, lambda v: "three")

    def test_names_and_attributes_survive(self) -> None:
        from purrjax import modify, vector, with_attrs

        x = with_attrs(vector([1, 2], names=["a", "b"]), unit="m")
        out = modify(x, lambda v: v + 1)
        self.assertEqual(out.names, ("a", "b"))
        self.assertEqual(out.attrs, {"unit": "m"})
        self.assertEqual(out.tolist(), [2, 3])

    def test_python_containers_keep_their_type(self) -> None:
        from purrjax import modify

        self.assertEqual(modify([1, 2, 3], lambda v: v + 1), [2, 3, 4])
        self.assertEqual(modify((1, 2), str), ("1", "2"))
        self.assertEqual(modify({"a": 1, "b": 2}, lambda v: v * 10), {"a": 10, "b": 20})
        self.assertEqual(modify(3, lambda v: v + 1), 4)
        self.assertIsNone(modify(None, lambda v: v))

    def test_arrays_keep_their_dtype(self) -> None:
        import jax.numpy as jnp

        from purrjax import CoercionError, modify

        arr = jnp.asarray([1, 2, 3])
        out = modify(arr, lambda v: v * 10)
        self.assertEqual(out.dtype, arr.dtype)
        self.assertEqual(out.tolist(), [10, 20, 30])

        matrix = jnp.arange(6).reshape(2, 3)
        self.assertEqual(modify(matrix, lambda row: row[::-1]).tolist(), [[2, 1, 0], [5, 4, 3]])
        with self.assertRaises(CoercionError):
            modify(matrix, lambda row: row[:2])

    def test_records_and_dataclasses(self) -> None:
        from purrjax import Record, modify

        self.assertEqual(modify(Record(a=1, b=2), lambda v: v * 10), Record(a=10, b=20))
        self.assertEqual(modify(Point(1, 2), lambda v: -v), Point(-1, -2))

    def test_scopes_cannot_be_modified(self) -> None:
        from purrjax import Environment, UnsupportedContainer, modify

        with self.assertRaisesRegex(UnsupportedContainer, "Don't know how to modify object of type Environment"):
            modify(Environment(a=1), lambda v: v)

    def test_shorthand_plucks_from_each_element(self) -> None:
        from purrjax import modify

        l1 = _nested_params()
        out = modify(l1, ["prop1", "param2"])
        self.assertEqual(out["obj1"].tolist(), [3, 4])
        self.assertEqual(out["obj2"].tolist(), [11, 12])

    def test_extra_arguments_are_forwarded(self) -> None:
        from purrjax import modify

        self.assertEqual(modify([1, 2], operator.add, 10), [11, 12])
        self.assertEqual(modify(["a"], lambda v, suffix: v + suffix, suffix="!"), ["a!"])

    def test_user_errors_propagate(self) -> None:
        from purrjax import modify

        def fail(_value):
            raise RuntimeError("user failure")

        with self.assertRaisesRegex(RuntimeError, "user failure"):
            modify([1], fail)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for modify tests")
class ModifyIfAtTests(unittest.TestCase):
    def test_modify_if_with_predicate(self) -> None:
        from purrjax import modify_if

        x = {"a": [1, 2], "b": "x", "c": [3]}
        self.assertEqual(modify_if(x, lambda v: isinstance(v, list), len), {"a": 2, "b": "x", "c": 1})

    def test_modify_if_with_mask(self) -> None:
        from purrjax import modify_if, vector

        self.assertEqual(modify_if([1, 2, 3], [True, False, True], operator.neg), [-1, 2, -3])
        self.assertEqual(modify_if([1, 2], vector([False, True]), operator.neg), [1, -2])

    def test_modify_if_mask_length_must_match(self) -> None:
        from purrjax import LengthMismatch, modify_if

        with self.assertRaises(LengthMismatch):
            modify_if([1, 2, 3], [True, False], operator.neg)

    def test_modify_if_predicate_must_return_logical(self) -> None:
        from purrjax import CoercionError, modify_if

        with self.assertRaisesRegex(CoercionError, "to a logical"):
            modify_if([1, 2], lambda v: v, operator.neg)

    def test_modify_if_with_name_shorthand(self) -> None:
        from purrjax import modify_if

        rows = [{"x": True, "y": 1}, {"x": False, "y": 2}]
        out = modify_if(rows, "x", lambda row: {**row, "y": row["y"] * 100})
        self.assertEqual(out, [{"x": True, "y": 100}, {"x": False, "y": 2}])

    def test_modify_at_by_name_converts_exactly_those_fields(self) -> None:
        from purrjax import VectorKind, modify_at

        frame = _frame()
        out = modify_at(frame, ["cyl", "am"], _to_character)

        self.assertEqual(out.names, frame.names)
        kinds = {name: column.kind for name, column in zip(out.names, out, strict=True)}
        self.assertEqual(
            kinds,
            {
                "mpg": VectorKind.DOUBLE,
                "cyl": VectorKind.CHARACTER,
                "disp": VectorKind.DOUBLE,
                "am": VectorKind.CHARACTER,
            },
        )
        self.assertEqual(out.element(1).tolist(), ["6.0", "4.0", "6.0"])
        self.assertEqual(out.element(0), frame.element(0))

    def test_modify_at_by_position(self) -> None:
        from purrjax import VectorKind, modify_at

        out = modify_at(_frame(), [1, 4], _to_character)
        self.assertEqual([column.kind for column in out], [VectorKind.CHARACTER, VectorKind.DOUBLE, VectorKind.DOUBLE, VectorKind.CHARACTER])

    def test_modify_at_negative_positions_exclude(self) -> None:
        from purrjax import modify_at

        self.assertEqual(modify_at([1, 2, 3], -2, operator.neg), [-1, 2, -3])
        self.assertEqual(modify_at([1, 2, 3], [-1, -3], operator.neg), [1, -2, 3])

    def test_modify_at_rejects_mixed_signs(self) -> None:
        from purrjax import InvalidIndex, modify_at

        with self.assertRaisesRegex(InvalidIndex, "mix positive and negative"):
            modify_at([1, 2, 3], [1, -2], operator.neg)

    def test_modify_at_non_finite_positions_select_nothing(self) -> None:
        from purrjax import modify_at

        for position in (math.nan, math.inf, -math.inf):
            with self.subTest(position=position):
                self.assertEqual(modify_at([1, 2], [position], operator.neg), [1, 2])
        self.assertEqual(modify_at([1, 2], [math.nan, 2], operator.neg), [1, -2])

    def test_modify_at_names_require_named_object(self) -> None:
        from purrjax import NoNamesError, modify_at

        with self.assertRaisesRegex(NoNamesError, "requires a named object"):
            modify_at([1, 2, 3], "a", operator.neg)

    def test_modify_at_empty_selector_selects_nothing(self) -> None:
        from purrjax import modify_at

        self.assertEqual(modify_at([1, 2, 3], [], operator.neg), [1, 2, 3])
        self.assertEqual(modify_at({"a": 1}, (), operator.neg), {"a": 1})

    def test_modify_at_rejects_unknown_selector_types(self) -> None:
        from purrjax import InvalidIndex, modify_at

        with self.assertRaises(InvalidIndex):
            modify_at([1, 2], {"a": 1}, operator.neg)
        with self.assertRaises(InvalidIndex):
            modify_at([1, 2], [True], operator.neg)

    def test_modify_at_on_named_vector(self) -> None:
        from purrjax import modify_at, vector

        x = vector([1, 2, 3], names=["a", "b", "c"])
        self.assertEqual(modify_at(x, "b", lambda v: v * 10), vector([1, 20, 3], names=["a", "b", "c"]))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for modify tests")
class Modify2Tests(unittest.TestCase):
    def test_modify2_preserves_type_of_first_argument(self) -> None:
        from purrjax import VectorKind, modify2, vector

        x = vector([1, 2], "integer", names=["foo", "bar"])
        out = modify2(x, [True, False], lambda a, keep: a if keep else 0)
        self.assertIs(out.kind, VectorKind.INTEGER)
        self.assertEqual(out, vector([1, 0], "integer", names=["foo", "bar"]))

    def test_modify2_recycles(self) -> None:
        from purrjax import modify2, vector

        self.assertEqual(modify2([1, 2], [10], operator.add), [11, 12])
        self.assertEqual(modify2([1], [1, 2, 3], operator.add), [2, 3, 4])
        self.assertEqual(modify2([1, 2], [1, 2, 3, 4], operator.add), [2, 4, 4, 6])

        grown = modify2(vector([1, 2], names=["a", "b"]), [0, 0, 0, 0], operator.add)
        self.assertEqual(grown.names, ("a", "b", "a", "b"))

    def test_modify2_rejects_incompatible_lengths(self) -> None:
        from purrjax import LengthMismatch, modify2

        with self.assertRaises(LengthMismatch):
            modify2([1, 2], [1, 2, 3], operator.add)
        with self.assertRaises(LengthMismatch):
            modify2({"a": 1}, [1, 2], operator.add)

    def test_imodify_passes_names_or_positions(self) -> None:
        from purrjax import imodify, vector

        named = vector(["a", "b"], names=["x", "y"])
        self.assertEqual(imodify(named, lambda v, n: f"{n}={v}"), vector(["x=a", "y=b"], names=["x", "y"]))
        self.assertEqual(imodify(["a", "b"], lambda v, i: f"{i}:{v}"), ["1:a", "2:b"])
        self.assertEqual(imodify({"k": 1}, lambda v, n: n * v), {"k": "k"})


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for modify tests")
class ModifyDepthTests(unittest.TestCase):
    def test_modify_depth_applies_at_requested_level(self) -> None:
        import jax.numpy as jnp

        from purrjax import modify_depth, pluck

        out = modify_depth(_nested_params(), 3, jnp.sum)
        self.assertEqual(int(pluck(out, "obj1", "prop1", "param1")), 3)
        self.assertEqual(int(pluck(out, "obj2", "prop2", "param2")), 48)

    def test_negative_depth_counts_from_leaves(self) -> None:
        import jax.numpy as jnp

        from purrjax import modify_depth, pluck

        out = modify_depth(_nested_params(), -1, jnp.sum)
        self.assertEqual(int(pluck(out, "obj1", "prop2", "param2")), 15)

    def test_depth_shorthand_plucks_one_level_down(self) -> None:
        from purrjax import modify_depth

        out = modify_depth(_nested_params(), 2, "param2")
        self.assertEqual(out["obj1"]["prop2"].tolist(), [7, 8])
        self.assertEqual(sorted(out["obj2"]), ["prop1", "prop2"])

    def test_depth_zero_applies_to_whole_value(self) -> None:
        from purrjax import modify_depth

        self.assertEqual(modify_depth([1, 2], 0, len), 2)

    def test_depth_one_maps_children(self) -> None:
        from purrjax import modify_depth

        self.assertEqual(modify_depth((1, 2), 1, operator.neg), (-1, -2))

    def test_insufficient_depth_raises_unless_ragged(self) -> None:
        import jax.numpy as jnp

        from purrjax import InsufficientDepth, modify_depth

        x = {"a": 1, "b": {"c": 2}}
        with self.assertRaisesRegex(InsufficientDepth, "not deep enough"):
            modify_depth(x, 2, operator.neg)
        self.assertEqual(modify_depth(x, 2, operator.neg, ragged=True), {"a": -1, "b": {"c": -2}})
        with self.assertRaises(InsufficientDepth):
            modify_depth(jnp.asarray([1, 2]), 1, operator.neg)

    def test_ragged_descends_into_atomic_vectors_above_target_level(self) -> None:
        from purrjax import InsufficientDepth, modify_depth, vector

        calls: list[object] = []

        def scale(value):
            calls.append(value)
            return value * 10

        out = modify_depth([vector([1.0, 2.0, 3.0])], 3, scale, ragged=True)
        self.assertEqual(len(calls), 3)
        self.assertEqual(out, [vector([10.0, 20.0, 30.0])])

        with self.assertRaises(InsufficientDepth):
            modify_depth([vector([1.0, 2.0, 3.0])], 3, scale)

    def test_negative_depth_is_ragged_by_default(self) -> None:
        from purrjax import modify_depth

        x = {"a": 1, "b": {"c": 2}}
        self.assertEqual(modify_depth(x, -1, operator.neg), {"a": -1, "b": {"c": -2}})

    def test_invalid_depth(self) -> None:
        from purrjax import InvalidDepth, modify_depth

        with self.assertRaises(InvalidDepth):
            modify_depth([1], 1.5, operator.neg)
        with self.assertRaises(InvalidDepth):
            modify_depth([1], True, operator.neg)
        with self.assertRaisesRegex(InvalidDepth, "Invalid `depth`"):
            modify_depth([1], -5, operator.neg)

    def test_at_depth_is_deprecated(self) -> None:
        from purrjax import at_depth

        with self.assertWarns(DeprecationWarning):
            out = at_depth([[1], [2]], 2, operator.neg)
        self.assertEqual(out, [[-1], [-2]])


if __name__ == "__main__":
    unittest.main()
