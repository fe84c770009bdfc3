"""GLSL operator and built-in function spellings."""

from typing import Dict

from shadergraph.ir import Arithmetic
from shadergraph.types import Comparison, ValueType

# Arithmetic operators
ARITHMETIC_OPERATORS: Dict[Arithmetic, str] = {
    Arithmetic.ADD: "+",
    Arithmetic.SUBTRACT: "-",
    Arithmetic.MULTIPLY: "*",
    Arithmetic.DIVIDE: "/",
}

# Comparison and logical operators
COMPARISON_OPERATORS: Dict[Comparison, str] = {
    Comparison.EQUAL: "==",
    Comparison.NOT_EQUAL: "!=",
    Comparison.GREATER: ">",
    Comparison.GREATER_EQUAL: ">=",
    Comparison.LESS: "<",
    Comparison.LESS_EQUAL: "<=",
    Comparison.AND: "&&",
    Comparison.OR: "||",
}

# Built-in functions used when lowering operations
TEXTURE_FUNCTION = "texture"
LERP_FUNCTION = "mix"

# Type spellings
TYPE_NAMES: Dict[ValueType, str] = {
    ValueType.BOOL: "bool",
    ValueType.INT: "int",
    ValueType.FLOAT1: "float",
    ValueType.FLOAT2: "vec2",
    ValueType.FLOAT3: "vec3",
    ValueType.FLOAT4: "vec4",
    ValueType.FLOAT3X3: "mat3",
    ValueType.FLOAT4X4: "mat4",
    ValueType.TEXTURE2D: "sampler2D",
}
