"""Closed enumerations shared by the shader graph and its code generators."""

from enum import Enum, auto


class ValueType(Enum):
    """Logical type of a shader value."""

    BOOL = auto()
    INT = auto()
    FLOAT1 = auto()
    FLOAT2 = auto()
    FLOAT3 = auto()
    FLOAT4 = auto()
    FLOAT3X3 = auto()
    FLOAT4X4 = auto()
    TEXTURE2D = auto()
    # Marker for operation nodes, their type comes from the operands
    OPERATION = auto()

    @property
    def component_count(self) -> int:
        """Number of scalar components, 0 for types that have none."""
        return _COMPONENT_COUNTS.get(self, 0)

    @property
    def is_float(self) -> bool:
        return self in _FLOAT_TYPES


_COMPONENT_COUNTS = {
    ValueType.BOOL: 1,
    ValueType.INT: 1,
    ValueType.FLOAT1: 1,
    ValueType.FLOAT2: 2,
    ValueType.FLOAT3: 3,
    ValueType.FLOAT4: 4,
    ValueType.FLOAT3X3: 9,
    ValueType.FLOAT4X4: 16,
}

_FLOAT_TYPES = frozenset(
    {
        ValueType.FLOAT1,
        ValueType.FLOAT2,
        ValueType.FLOAT3,
        ValueType.FLOAT4,
        ValueType.FLOAT3X3,
        ValueType.FLOAT4X4,
    }
)


class ScalarType(Enum):
    """Element type of a scalar custom uniform or named input."""

    BOOL = auto()
    INT = auto()
    FLOAT = auto()

    @property
    def value_type(self) -> ValueType:
        return {
            ScalarType.BOOL: ValueType.BOOL,
            ScalarType.INT: ValueType.INT,
            ScalarType.FLOAT: ValueType.FLOAT1,
        }[self]


class ShaderStage(Enum):
    """Shader pipeline stage."""

    VERTEX = auto()
    FRAGMENT = auto()


class GeometrySlot(Enum):
    """Per-vertex attribute streams a geometry can provide."""

    POSITION = auto()
    TEX_COORD0 = auto()
    TEX_COORD1 = auto()
    NORMAL = auto()
    TANGENT = auto()
    COLOR = auto()

    @property
    def value_type(self) -> ValueType:
        if self in (GeometrySlot.TEX_COORD0, GeometrySlot.TEX_COORD1):
            return ValueType.FLOAT2
        if self == GeometrySlot.COLOR:
            return ValueType.FLOAT4
        return ValueType.FLOAT3


class BuiltinMatrix(Enum):
    """Matrices every program receives without declaring them."""

    MODEL = auto()
    VIEW = auto()
    PROJECTION = auto()


class MaterialProperty(Enum):
    """Fields of one material channel."""

    TEXTURE = auto()
    SCALE = auto()
    OFFSET = auto()
    COLOR = auto()

    @property
    def value_type(self) -> ValueType:
        return {
            MaterialProperty.TEXTURE: ValueType.TEXTURE2D,
            MaterialProperty.SCALE: ValueType.FLOAT2,
            MaterialProperty.OFFSET: ValueType.FLOAT2,
            MaterialProperty.COLOR: ValueType.FLOAT4,
        }[self]


class Comparison(Enum):
    """Kinds of the compare operator."""

    EQUAL = auto()
    NOT_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    AND = auto()
    OR = auto()


class Filter(Enum):
    """Texture filtering requested by a sample operation."""

    LINEAR = auto()
    NEAREST = auto()


# Number of slots in the material table every stage declares
MATERIAL_CAPACITY = 16
