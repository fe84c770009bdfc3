"""GLSL 3.x backend."""

import math
from enum import Enum
from typing import Sequence

from loguru import logger

from shadergraph.document import (
    FragmentShader,
    InputAttribute,
    ShaderDocument,
    VertexShader,
)
from shadergraph.errors import ContractViolation
from shadergraph.generator.base import (
    Assignment,
    CodeGenerator,
    Declaration,
)
from shadergraph.generator.code_block import CodeBlock
from shadergraph.generator.operators import (
    ARITHMETIC_OPERATORS,
    COMPARISON_OPERATORS,
    LERP_FUNCTION,
    TEXTURE_FUNCTION,
    TYPE_NAMES,
)
from shadergraph.ir import (
    Arithmetic,
    Branch,
    BuiltinUniform,
    ChannelProperty,
    Compare,
    Construct,
    CustomUniform,
    FragmentIn,
    FragmentOutColor,
    InstanceID,
    Lerp,
    Literal,
    Operation,
    Operator,
    OperationResult,
    Sample2D,
    Swizzle,
    ValueRepresentation,
    VertexInput,
    VertexOut,
    VertexOutPointSize,
    VertexOutPosition,
)
from shadergraph.types import (
    MATERIAL_CAPACITY,
    BuiltinMatrix,
    GeometrySlot,
    MaterialProperty,
    ShaderStage,
    ValueType,
)
from shadergraph.values import ShaderValue


class GLSLVersion(Enum):
    """GLSL dialects the backend can emit.

    The dialect only changes the version directive and precision statements.
    """

    V300_ES = "300 es"
    V330_CORE = "330 core"

    @property
    def directive(self) -> str:
        return f"#version {self.value}"

    def precision_qualifiers(self) -> list[str]:
        if self == GLSLVersion.V300_ES:
            return ["precision highp float;", "precision highp int;"]
        return []


_ATTRIBUTE_PREFIXES = {
    GeometrySlot.POSITION: "iPos{}",
    GeometrySlot.TEX_COORD0: "iUV{}_0",
    GeometrySlot.TEX_COORD1: "iUV{}_1",
    GeometrySlot.NORMAL: "iNml{}",
    GeometrySlot.TANGENT: "iTan{}",
    GeometrySlot.COLOR: "iClr{}",
}

_MATRIX_NAMES = {
    BuiltinMatrix.MODEL: "mMtx",
    BuiltinMatrix.VIEW: "vMtx",
    BuiltinMatrix.PROJECTION: "pMtx",
}

_MATERIAL_FIELDS = {
    MaterialProperty.OFFSET: "offset",
    MaterialProperty.SCALE: "scale",
    MaterialProperty.COLOR: "color",
}

MATERIAL_STRUCT = "Material"
MATERIAL_TABLE = "materials"
MATERIAL_TEXTURES = "materialTextures"

# Varyings cannot carry these types
_ILLEGAL_VARYINGS = frozenset({ValueType.BOOL, ValueType.TEXTURE2D})


class GLSLCodeGenerator(CodeGenerator):
    """Generates GLSL vertex and fragment source from shader documents."""

    def __init__(self, version: GLSLVersion = GLSLVersion.V300_ES):
        super().__init__()
        self.version = version

    # --- Types and names ---

    def type_name(self, value_type: ValueType) -> str:
        if value_type == ValueType.OPERATION:
            raise ContractViolation("operation has no type")
        return TYPE_NAMES[value_type]

    def variable_name(self, representation: ValueRepresentation) -> str:
        match representation:
            case OperationResult() | Construct():
                raise ContractViolation(
                    f"{type(representation).__name__} values have no name"
                )

            case VertexInput(slot, geometry_index):
                return _ATTRIBUTE_PREFIXES[slot].format(geometry_index)
            case VertexOutPosition():
                return "gl_Position"
            case VertexOutPointSize():
                return "gl_PointSize"
            case VertexOut(name) | FragmentIn(name):
                return f"io_{name}"
            case FragmentOutColor():
                return "fClr"
            case InstanceID():
                return "iid"

            case BuiltinUniform(matrix):
                return _MATRIX_NAMES[matrix]
            case CustomUniform(index):
                return f"u{index}"

            case Literal(value, value_type):
                return self.literal(value, value_type)

            case Swizzle(parent, component):
                return f"{self.reference(parent)}.{component}"

            case ChannelProperty(index, MaterialProperty.TEXTURE):
                return f"{MATERIAL_TEXTURES}[{index}]"
            case ChannelProperty(index, prop):
                return f"{MATERIAL_TABLE}[{index}].{_MATERIAL_FIELDS[prop]}"

        raise ContractViolation(f"Unknown representation: {representation!r}")

    def literal(self, value: bool | int | float, value_type: ValueType) -> str:
        if value_type == ValueType.BOOL:
            return "true" if value else "false"
        if value_type == ValueType.INT:
            return str(int(value))
        if not math.isfinite(value):
            raise ContractViolation(f"Literal {value!r} has no GLSL spelling")
        text = str(float(value))
        if "." not in text and "e" not in text.lower():
            text += ".0"
        return text

    # --- Operations ---

    def symbol(self, operator: Operator) -> str:
        match operator:
            case Arithmetic():
                return ARITHMETIC_OPERATORS[operator]
            case Compare(kind):
                return COMPARISON_OPERATORS[kind]
        raise ContractViolation(f"{operator!r} has no infix symbol")

    def render_operation(self, operation: Operation) -> str:
        lhs = self.reference(operation.lhs)
        rhs = self.reference(operation.rhs)
        match operation.operator:
            case Arithmetic() | Compare():
                return f"{lhs} {self.symbol(operation.operator)} {rhs}"
            case Branch():
                return self.render_branch(operation)
            case Sample2D():
                return f"{TEXTURE_FUNCTION}({lhs}, {rhs})"
            case Lerp(factor):
                return f"{LERP_FUNCTION}({lhs}, {rhs}, {self.reference(factor)})"
        raise ContractViolation(f"Unknown operator: {operation.operator!r}")

    def render_branch(self, operation: Operation) -> str:
        condition = operation.operator.condition  # type: ignore[union-attr]
        return (
            f"{self.reference(condition)} ? "
            f"{self.reference(operation.lhs)} : {self.reference(operation.rhs)}"
        )

    def render_construct(self, construct: Construct) -> str:
        parts = ", ".join(self.reference(part) for part in construct.components)
        return f"{self.type_name(construct.value_type)}({parts})"

    # --- Stage bodies ---

    def generate_main(self, document: ShaderDocument) -> str:
        code = CodeBlock(indent_level=1)
        if document.stage == ShaderStage.VERTEX:
            code.add_line(f"{self.variable_name(InstanceID())} = gl_InstanceID;")

        for statement in self.schedule(document):
            match statement:
                case Declaration(value):
                    code.add_line(self._declaration(value))
                case Assignment(target, value):
                    code.add_line(
                        f"{self.variable_name(target)} = {self.reference(value)};"
                    )
        return code.get_code()

    def _declaration(self, value: ShaderValue) -> str:
        match value.representation:
            case OperationResult(operation):
                expression = self.render_operation(operation)
            case Construct() as construct:
                expression = self.render_construct(construct)
            case _:
                raise ContractViolation(f"{value!r} needs no declaration")
        # Operands are rendered before the temporary exists
        name = self.declare_temporary(value)
        return f"{self.type_name(value.value_type)} {name} = {expression};"

    # --- Source assembly ---

    def generate_vertex(
        self, vertex: VertexShader, attributes: Sequence[InputAttribute]
    ) -> str:
        code = CodeBlock()
        self._add_header(code)

        mat4 = self.type_name(ValueType.FLOAT4X4)
        code.add_line(
            f"uniform {mat4} {self.variable_name(BuiltinUniform(BuiltinMatrix.VIEW))};"
        )
        code.add_line(
            f"uniform {mat4} "
            f"{self.variable_name(BuiltinUniform(BuiltinMatrix.PROJECTION))};"
        )
        code.add_lines(self._custom_uniforms(vertex))
        code.add_line()

        for location, attribute in enumerate(attributes):
            code.add_line(
                f"layout(location = {location}) in "
                f"{self.type_name(attribute.value_type)} "
                f"{self.variable_name(attribute.representation)};"
            )
        # Per-instance model matrix follows the last geometry attribute
        code.add_line(
            f"layout(location = {len(attributes)}) in {mat4} "
            f"{self.variable_name(BuiltinUniform(BuiltinMatrix.MODEL))};"
        )
        code.add_line(self._interface("out", InstanceID(), ValueType.INT))
        for name, value_type in vertex.output.types().items():
            code.add_line(self._interface("out", VertexOut(name), value_type))
        code.add_line()

        code.add_lines(self._material_table(include_textures=False))
        code.add_line()

        self._add_main(code, vertex)
        logger.debug(f"Vertex stage: {len(code.lines)} lines")
        return code.get_code()

    def generate_fragment(self, fragment: FragmentShader) -> str:
        code = CodeBlock()
        self._add_header(code)

        code.add_lines(self._custom_uniforms(fragment))
        code.add_line()

        code.add_line(self._interface("in", InstanceID(), ValueType.INT))
        for name, value_type in fragment.input.named_types().items():
            code.add_line(self._interface("in", FragmentIn(name), value_type))
        code.add_line(
            f"layout(location = 0) out {self.type_name(ValueType.FLOAT4)} "
            f"{self.variable_name(FragmentOutColor())};"
        )
        code.add_line()

        code.add_lines(self._material_table(include_textures=True))
        code.add_line()

        self._add_main(code, fragment)
        logger.debug(f"Fragment stage: {len(code.lines)} lines")
        return code.get_code()

    def _add_header(self, code: CodeBlock) -> None:
        code.add_line(self.version.directive)
        code.add_lines(self.version.precision_qualifiers())
        code.add_line()

    def _add_main(self, code: CodeBlock, document: ShaderDocument) -> None:
        body = self.generate_main(document)
        with code.block("void main()"):
            # Body lines are already indented by generate_main
            if body:
                code.lines.extend(body.split("\n"))

    def _custom_uniforms(self, document: ShaderDocument) -> list[str]:
        return [
            f"uniform {self.type_name(value.value_type)} "
            f"{self.variable_name(value.representation)};"
            for value in document.sorted_custom_uniforms()
        ]

    def _interface(
        self, qualifier: str, representation: ValueRepresentation, value_type: ValueType
    ) -> str:
        if value_type in _ILLEGAL_VARYINGS:
            raise ContractViolation(
                f"{representation} cannot be passed between stages as "
                f"{value_type.name}"
            )
        flat = "flat " if value_type == ValueType.INT else ""
        return (
            f"{flat}{qualifier} {self.type_name(value_type)} "
            f"{self.variable_name(representation)};"
        )

    def _material_table(self, include_textures: bool) -> list[str]:
        lines = [f"struct {MATERIAL_STRUCT} {{"]
        for prop, field_name in _MATERIAL_FIELDS.items():
            lines.append(f"    {self.type_name(prop.value_type)} {field_name};")
        lines.append("};")
        lines.append(f"uniform {MATERIAL_STRUCT} {MATERIAL_TABLE}[{MATERIAL_CAPACITY}];")
        if include_textures:
            lines.append(
                f"uniform {self.type_name(ValueType.TEXTURE2D)} "
                f"{MATERIAL_TEXTURES}[{MATERIAL_CAPACITY}];"
            )
        return lines
