from shadergraph.document import (
    Channel,
    FragmentShader,
    InputAttribute,
    VertexShader,
)
from shadergraph.errors import ContractViolation, LinkError, ShaderGraphError
from shadergraph.generator import (
    GeneratedSource,
    GLSLCodeGenerator,
    GLSLVersion,
    TargetType,
    add_line_numbers,
    create_generator,
)
from shadergraph.types import (
    Comparison,
    Filter,
    GeometrySlot,
    ScalarType,
    ShaderStage,
    ValueType,
)
from shadergraph.values import (
    Mat3,
    Mat4,
    Sampler2D,
    Scalar,
    ShaderValue,
    Vec2,
    Vec3,
    Vec4,
    literal,
)

__version__ = "0.1.0"


__all__ = [
    "Channel",
    "Comparison",
    "ContractViolation",
    "Filter",
    "FragmentShader",
    "GeneratedSource",
    "GeometrySlot",
    "GLSLCodeGenerator",
    "GLSLVersion",
    "InputAttribute",
    "LinkError",
    "Mat3",
    "Mat4",
    "Sampler2D",
    "Scalar",
    "ScalarType",
    "ShaderGraphError",
    "ShaderStage",
    "ShaderValue",
    "TargetType",
    "ValueType",
    "Vec2",
    "Vec3",
    "Vec4",
    "add_line_numbers",
    "create_generator",
    "literal",
]
