"""Intermediate representation for shader graphs.

A shader value is described by its *representation*: where the value comes
from (a vertex attribute, a uniform, a literal, another value's component, the
result of an operation...). Representations and operators are closed tagged
unions; backends match on them exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Union

from shadergraph.errors import ContractViolation
from shadergraph.types import (
    BuiltinMatrix,
    Comparison,
    Filter,
    GeometrySlot,
    MaterialProperty,
    ValueType,
)

if TYPE_CHECKING:
    from shadergraph.values import ShaderValue


# Representations


@dataclass(frozen=True)
class VertexInput:
    """Per-vertex attribute read from a geometry stream."""

    slot: GeometrySlot
    geometry_index: int = 0


@dataclass(frozen=True)
class VertexOutPosition:
    """Clip-space position written by the vertex stage."""


@dataclass(frozen=True)
class VertexOutPointSize:
    """Rasterized point size written by the vertex stage."""


@dataclass(frozen=True)
class VertexOut:
    """Named value passed from the vertex stage to the fragment stage."""

    name: str


@dataclass(frozen=True)
class FragmentIn:
    """Named value received by the fragment stage."""

    name: str


@dataclass(frozen=True)
class FragmentOutColor:
    """Final color written by the fragment stage."""


@dataclass(frozen=True)
class InstanceID:
    """Index of the instance being drawn."""


@dataclass(frozen=True)
class BuiltinUniform:
    """Model, view or projection matrix."""

    matrix: BuiltinMatrix


@dataclass(frozen=True)
class CustomUniform:
    """User declared uniform, identified by its allocation index."""

    index: int
    value_type: ValueType


@dataclass(frozen=True)
class Literal:
    """Compile-time constant."""

    value: bool | int | float
    value_type: ValueType


@dataclass(frozen=True)
class Swizzle:
    """Single component of a vector value."""

    parent: ShaderValue
    component: str


@dataclass(frozen=True)
class ChannelProperty:
    """Field of one slot of the material table."""

    index: int
    prop: MaterialProperty


@dataclass(frozen=True)
class OperationResult:
    """Value computed by an operation node."""

    operation: Operation


@dataclass(frozen=True, eq=False)
class Construct:
    """Vector or matrix assembled from smaller values.

    Constructed values have no name of their own; generators declare them as
    temporaries before use.
    """

    value_type: ValueType
    components: tuple[ShaderValue, ...]


ValueRepresentation = Union[
    VertexInput,
    VertexOutPosition,
    VertexOutPointSize,
    VertexOut,
    FragmentIn,
    FragmentOutColor,
    InstanceID,
    BuiltinUniform,
    CustomUniform,
    Literal,
    Swizzle,
    ChannelProperty,
    OperationResult,
    Construct,
]

REPRESENTATION_TYPES: tuple[type, ...] = ValueRepresentation.__args__  # type: ignore[attr-defined]


# Operators


class Arithmetic(Enum):
    """Infix arithmetic operators."""

    ADD = auto()
    SUBTRACT = auto()
    MULTIPLY = auto()
    DIVIDE = auto()


@dataclass(frozen=True)
class Compare:
    kind: Comparison


@dataclass(frozen=True)
class Branch:
    """Ternary select: lhs when the condition holds, rhs otherwise."""

    condition: ShaderValue


@dataclass(frozen=True)
class Sample2D:
    """Texture lookup: lhs is the sampler, rhs the coordinate."""

    filter: Filter = Filter.LINEAR


@dataclass(frozen=True)
class Lerp:
    """Linear interpolation between lhs and rhs."""

    factor: ShaderValue


Operator = Union[Arithmetic, Compare, Branch, Sample2D, Lerp]

OPERATOR_TYPES: tuple[type, ...] = Operator.__args__  # type: ignore[attr-defined]

_NUMERIC_TYPES = frozenset(
    {
        ValueType.INT,
        ValueType.FLOAT1,
        ValueType.FLOAT2,
        ValueType.FLOAT3,
        ValueType.FLOAT4,
        ValueType.FLOAT3X3,
        ValueType.FLOAT4X4,
    }
)

# Matrix * vector products allowed besides same-type operands
_MATRIX_VECTOR = {
    (ValueType.FLOAT3X3, ValueType.FLOAT3): ValueType.FLOAT3,
    (ValueType.FLOAT4X4, ValueType.FLOAT4): ValueType.FLOAT4,
}


@dataclass(frozen=True, eq=False)
class Operation:
    """Graph node binding an operator to its operands."""

    lhs: ShaderValue
    operator: Operator
    rhs: ShaderValue

    def __post_init__(self) -> None:
        # Malformed operations must never reach a backend
        _ = self.result_type

    @property
    def value_type(self) -> ValueType:
        return ValueType.OPERATION

    @property
    def result_type(self) -> ValueType:
        """Type of the value this operation produces."""
        lhs_type = self.lhs.value_type
        rhs_type = self.rhs.value_type

        match self.operator:
            case Arithmetic():
                if lhs_type == rhs_type and lhs_type in _NUMERIC_TYPES:
                    return lhs_type
                if self.operator == Arithmetic.MULTIPLY:
                    product = _MATRIX_VECTOR.get((lhs_type, rhs_type))
                    if product is not None:
                        return product
                raise ContractViolation(
                    f"Cannot apply {self.operator.name.lower()} to "
                    f"{lhs_type.name} and {rhs_type.name}"
                )

            case Compare(kind):
                if kind in (Comparison.AND, Comparison.OR):
                    if lhs_type == rhs_type == ValueType.BOOL:
                        return ValueType.BOOL
                    raise ContractViolation(
                        f"Logical {kind.name.lower()} needs BOOL operands, "
                        f"got {lhs_type.name} and {rhs_type.name}"
                    )
                if lhs_type != rhs_type or lhs_type == ValueType.TEXTURE2D:
                    raise ContractViolation(
                        f"Cannot compare {lhs_type.name} with {rhs_type.name}"
                    )
                return ValueType.BOOL

            case Branch(condition):
                if condition.value_type != ValueType.BOOL:
                    raise ContractViolation(
                        f"Branch condition must be BOOL, got "
                        f"{condition.value_type.name}"
                    )
                if lhs_type != rhs_type:
                    raise ContractViolation(
                        f"Branch outcomes differ: {lhs_type.name} and {rhs_type.name}"
                    )
                return lhs_type

            case Sample2D():
                if lhs_type != ValueType.TEXTURE2D or rhs_type != ValueType.FLOAT2:
                    raise ContractViolation(
                        f"Texture sampling needs TEXTURE2D and FLOAT2, got "
                        f"{lhs_type.name} and {rhs_type.name}"
                    )
                return ValueType.FLOAT4

            case Lerp(factor):
                if lhs_type != rhs_type or not lhs_type.is_float:
                    raise ContractViolation(
                        f"Cannot interpolate between {lhs_type.name} and "
                        f"{rhs_type.name}"
                    )
                if factor.value_type != ValueType.FLOAT1:
                    raise ContractViolation(
                        f"Interpolation factor must be FLOAT1, got "
                        f"{factor.value_type.name}"
                    )
                return lhs_type

        raise ContractViolation(f"Unknown operator: {self.operator!r}")

    def dependencies(self) -> tuple[ShaderValue, ...]:
        """Values this operation reads, in emission order."""
        match self.operator:
            case Branch(condition):
                return (condition, self.lhs, self.rhs)
            case Lerp(factor):
                return (self.lhs, self.rhs, factor)
        return (self.lhs, self.rhs)
