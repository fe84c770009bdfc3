"""Shader values: the nodes application code wires together.

Every value exposes its logical type, its representation and, when it is the
result of a computation, the operation backing it. Values are compared and
hashed by identity; two values share a name in generated code only when their
representations are equal.
"""

from __future__ import annotations

from typing import ClassVar, TypeVar

from shadergraph.errors import ContractViolation
from shadergraph.ir import (
    Arithmetic,
    Branch,
    Compare,
    Construct,
    Lerp,
    Literal,
    Operation,
    OperationResult,
    Sample2D,
    Swizzle,
    ValueRepresentation,
)
from shadergraph.types import Comparison, Filter, ValueType

V = TypeVar("V", bound="ShaderValue")

_COMPONENTS = "xyzw"


class ShaderValue:
    """Base for every value kind in a shader graph."""

    allowed_types: ClassVar[frozenset[ValueType]] = frozenset()

    def __init__(
        self,
        representation: ValueRepresentation,
        value_type: ValueType | None = None,
    ):
        if value_type is None:
            if len(self.allowed_types) != 1:
                raise ContractViolation(
                    f"{type(self).__name__} needs an explicit value type"
                )
            value_type = next(iter(self.allowed_types))
        if value_type not in self.allowed_types:
            raise ContractViolation(
                f"{type(self).__name__} cannot hold a {value_type.name} value"
            )
        self.representation = representation
        self.value_type = value_type

    @property
    def operation(self) -> Operation | None:
        """Operation computing this value, if any."""
        if isinstance(self.representation, OperationResult):
            return self.representation.operation
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value_type.name}, {self.representation!r})"

    # Arithmetic

    def __add__(self, other: object) -> ShaderValue:
        return _apply(self, Arithmetic.ADD, self._coerce(other))

    def __radd__(self, other: object) -> ShaderValue:
        return _apply(self._coerce(other), Arithmetic.ADD, self)

    def __sub__(self, other: object) -> ShaderValue:
        return _apply(self, Arithmetic.SUBTRACT, self._coerce(other))

    def __rsub__(self, other: object) -> ShaderValue:
        return _apply(self._coerce(other), Arithmetic.SUBTRACT, self)

    def __mul__(self, other: object) -> ShaderValue:
        return _apply(self, Arithmetic.MULTIPLY, self._coerce(other))

    def __rmul__(self, other: object) -> ShaderValue:
        return _apply(self._coerce(other), Arithmetic.MULTIPLY, self)

    def __truediv__(self, other: object) -> ShaderValue:
        return _apply(self, Arithmetic.DIVIDE, self._coerce(other))

    def __rtruediv__(self, other: object) -> ShaderValue:
        return _apply(self._coerce(other), Arithmetic.DIVIDE, self)

    # Comparisons

    def equal(self, other: object) -> Scalar:
        return self._compare(Comparison.EQUAL, other)

    def not_equal(self, other: object) -> Scalar:
        return self._compare(Comparison.NOT_EQUAL, other)

    def greater(self, other: object) -> Scalar:
        return self._compare(Comparison.GREATER, other)

    def greater_equal(self, other: object) -> Scalar:
        return self._compare(Comparison.GREATER_EQUAL, other)

    def less(self, other: object) -> Scalar:
        return self._compare(Comparison.LESS, other)

    def less_equal(self, other: object) -> Scalar:
        return self._compare(Comparison.LESS_EQUAL, other)

    def logical_and(self, other: object) -> Scalar:
        return self._compare(Comparison.AND, other)

    def logical_or(self, other: object) -> Scalar:
        return self._compare(Comparison.OR, other)

    def lerp(self: V, other: V, factor: Scalar | float) -> V:
        """Interpolate from this value to ``other`` by ``factor``."""
        if not isinstance(factor, ShaderValue):
            factor = literal(float(factor))
        return _apply(self, Lerp(factor), other)  # type: ignore[return-value]

    def _compare(self, kind: Comparison, other: object) -> Scalar:
        return _apply(self, Compare(kind), self._coerce(other))  # type: ignore[return-value]

    def _coerce(self, other: object) -> ShaderValue:
        if isinstance(other, ShaderValue):
            return other
        if isinstance(other, (bool, int, float)) and isinstance(self, Scalar):
            if self.value_type == ValueType.FLOAT1:
                return literal(float(other))
            if self.value_type == ValueType.INT and isinstance(other, float):
                raise ContractViolation(
                    f"Cannot combine INT with float {other!r} without truncating it"
                )
            if self.value_type == ValueType.INT and not isinstance(other, bool):
                return literal(int(other))
            return literal(other)
        raise ContractViolation(
            f"Cannot combine {self.value_type.name} with {type(other).__name__}"
        )

    def _component(self, component: str) -> Scalar:
        count = self.value_type.component_count
        if component not in _COMPONENTS[:count] or count < 2 or count > 4:
            raise ContractViolation(
                f"{self.value_type.name} has no component '{component}'"
            )
        return Scalar(Swizzle(self, component), ValueType.FLOAT1)

    @classmethod
    def construct(cls: type[V], *parts: ShaderValue) -> V:
        """Assemble a composite value from smaller values."""
        (value_type,) = cls.allowed_types
        for part in parts:
            if part.value_type.component_count == 0:
                raise ContractViolation(
                    f"{part.value_type.name} cannot be a component of {value_type.name}"
                )
        total = sum(part.value_type.component_count for part in parts)
        if not parts or total != value_type.component_count:
            raise ContractViolation(
                f"Cannot construct {value_type.name} from "
                f"{[part.value_type.name for part in parts]}"
            )
        return cls(Construct(value_type, tuple(parts)), value_type)


class Scalar(ShaderValue):
    allowed_types = frozenset({ValueType.BOOL, ValueType.INT, ValueType.FLOAT1})

    def select(self, success: V, failure: V) -> V:
        """Pick ``success`` when this condition holds, ``failure`` otherwise."""
        return _apply(success, Branch(self), failure)  # type: ignore[return-value]

    @classmethod
    def construct(cls, *parts: ShaderValue) -> Scalar:
        raise ContractViolation("Scalars cannot be constructed from parts")


class Vec2(ShaderValue):
    allowed_types = frozenset({ValueType.FLOAT2})

    @property
    def x(self) -> Scalar:
        return self._component("x")

    @property
    def y(self) -> Scalar:
        return self._component("y")


class Vec3(ShaderValue):
    allowed_types = frozenset({ValueType.FLOAT3})

    @property
    def x(self) -> Scalar:
        return self._component("x")

    @property
    def y(self) -> Scalar:
        return self._component("y")

    @property
    def z(self) -> Scalar:
        return self._component("z")


class Vec4(ShaderValue):
    allowed_types = frozenset({ValueType.FLOAT4})

    @property
    def x(self) -> Scalar:
        return self._component("x")

    @property
    def y(self) -> Scalar:
        return self._component("y")

    @property
    def z(self) -> Scalar:
        return self._component("z")

    @property
    def w(self) -> Scalar:
        return self._component("w")


class Mat3(ShaderValue):
    allowed_types = frozenset({ValueType.FLOAT3X3})


class Mat4(ShaderValue):
    allowed_types = frozenset({ValueType.FLOAT4X4})


class Sampler2D(ShaderValue):
    allowed_types = frozenset({ValueType.TEXTURE2D})

    def sample(self, uv: Vec2, filter: Filter = Filter.LINEAR) -> Vec4:
        """Look up this texture at ``uv``."""
        return _apply(self, Sample2D(filter), uv)  # type: ignore[return-value]

    @classmethod
    def construct(cls, *parts: ShaderValue) -> Sampler2D:
        raise ContractViolation("Samplers cannot be constructed from parts")


VALUE_KINDS: dict[ValueType, type[ShaderValue]] = {
    ValueType.BOOL: Scalar,
    ValueType.INT: Scalar,
    ValueType.FLOAT1: Scalar,
    ValueType.FLOAT2: Vec2,
    ValueType.FLOAT3: Vec3,
    ValueType.FLOAT4: Vec4,
    ValueType.FLOAT3X3: Mat3,
    ValueType.FLOAT4X4: Mat4,
    ValueType.TEXTURE2D: Sampler2D,
}


def value_of_type(
    representation: ValueRepresentation, value_type: ValueType
) -> ShaderValue:
    """Wrap a representation in the value kind matching ``value_type``."""
    kind = VALUE_KINDS.get(value_type)
    if kind is None:
        raise ContractViolation(f"No value kind holds {value_type.name}")
    return kind(representation, value_type)


def literal(value: bool | int | float) -> Scalar:
    """Create a constant scalar."""
    if isinstance(value, bool):
        value_type = ValueType.BOOL
    elif isinstance(value, int):
        value_type = ValueType.INT
    elif isinstance(value, float):
        value_type = ValueType.FLOAT1
    else:
        raise ContractViolation(f"Unsupported literal: {value!r}")
    return Scalar(Literal(value, value_type), value_type)


def _apply(lhs: ShaderValue, operator: object, rhs: ShaderValue) -> ShaderValue:
    operation = Operation(lhs, operator, rhs)  # type: ignore[arg-type]
    return value_of_type(OperationResult(operation), operation.result_type)
