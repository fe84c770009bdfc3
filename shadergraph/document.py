"""Shader documents: per-stage containers of uniforms, channels and interfaces.

Application code builds one ``VertexShader`` and one ``FragmentShader`` per
program. Documents are only changed through their accessors while the graph is
being built; code generators read them and never write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shadergraph.errors import ContractViolation
from shadergraph.ir import (
    BuiltinUniform,
    ChannelProperty,
    CustomUniform,
    FragmentIn,
    FragmentOutColor,
    InstanceID,
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
    ScalarType,
    ShaderStage,
    ValueType,
)
from shadergraph.values import (
    Mat4,
    Sampler2D,
    Scalar,
    ShaderValue,
    Vec2,
    Vec3,
    Vec4,
    value_of_type,
)

# Value kinds a custom uniform can take
UNIFORM_KINDS: tuple[type[ShaderValue], ...] = (Scalar, Vec2, Vec3, Vec4, Mat4)


@dataclass(frozen=True)
class InputAttribute:
    """One entry of the vertex attribute binding list."""

    slot: GeometrySlot
    geometry_index: int = 0

    @property
    def value_type(self) -> ValueType:
        return self.slot.value_type

    @property
    def representation(self) -> VertexInput:
        return VertexInput(self.slot, self.geometry_index)


class Channel:
    """One slot of the material table.

    All four values are derived from the channel index alone.
    """

    def __init__(self, index: int):
        self.index = index
        self.texture = Sampler2D(ChannelProperty(index, MaterialProperty.TEXTURE))
        self.scale = Vec2(ChannelProperty(index, MaterialProperty.SCALE))
        self.offset = Vec2(ChannelProperty(index, MaterialProperty.OFFSET))
        self.color = Vec4(ChannelProperty(index, MaterialProperty.COLOR))

    def __repr__(self) -> str:
        return f"Channel({self.index})"


def _shape_type(as_type: type[ShaderValue], scalar_type: ScalarType) -> ValueType:
    if as_type is Scalar:
        return scalar_type.value_type
    (value_type,) = as_type.allowed_types
    return value_type


def _check_name(name: str, what: str) -> None:
    # Names are emitted behind an "io_" prefix, so a leading underscore would
    # also produce the reserved "__" sequence
    if (
        not name.isidentifier()
        or not name.isascii()
        or name.startswith("_")
        or "__" in name
    ):
        raise ContractViolation(f"Invalid {what} name: {name!r}")


class ShaderDocument(ABC):
    """State shared by both stage documents."""

    stage: ShaderStage

    def __init__(self) -> None:
        self._custom_uniforms: dict[str, ShaderValue] = {}
        self._channels: dict[int, Channel] = {}

    def uniform(
        self,
        name: str,
        as_type: type[ShaderValue] = Scalar,
        scalar_type: ScalarType = ScalarType.FLOAT,
    ) -> ShaderValue:
        """Create or return an existing custom uniform.

        Uniforms are identified by name. Asking for an existing name with a
        different shape is an error.
        """
        if as_type not in UNIFORM_KINDS:
            raise ContractViolation(
                f"Custom uniforms cannot be of kind {as_type.__name__}"
            )
        value_type = _shape_type(as_type, scalar_type)

        existing = self._custom_uniforms.get(name)
        if existing is not None:
            if type(existing) is as_type and existing.value_type == value_type:
                return existing
            raise ContractViolation(
                f"Uniform '{name}' is already declared as "
                f"{existing.value_type.name}, cannot redeclare as {value_type.name}"
            )

        index = len(self._custom_uniforms)
        value = as_type(CustomUniform(index, value_type), value_type)
        self._custom_uniforms[name] = value
        return value

    @property
    def custom_uniforms(self) -> dict[str, ShaderValue]:
        return dict(self._custom_uniforms)

    def sorted_custom_uniforms(self) -> list[ShaderValue]:
        """Custom uniforms ordered by their allocated index."""
        return sorted(
            self._custom_uniforms.values(),
            key=lambda value: value.representation.index,  # type: ignore[union-attr]
        )

    def channel(self, index: int) -> Channel:
        """Return the material channel at ``index``, creating it on first use."""
        if not 0 <= index < MATERIAL_CAPACITY:
            raise ContractViolation(
                f"Channel index {index} outside 0..{MATERIAL_CAPACITY - 1}"
            )
        if index not in self._channels:
            self._channels[index] = Channel(index)
        return self._channels[index]

    @property
    def channels(self) -> list[Channel]:
        return [self._channels[index] for index in sorted(self._channels)]

    @property
    def instance_id(self) -> Scalar:
        return Scalar(InstanceID(), ValueType.INT)

    @abstractmethod
    def assignments(self) -> list[tuple[ValueRepresentation, ShaderValue]]:
        """Root outputs of this stage paired with the values written to them."""
        ...


# Vertex stage


class VertexInputs:
    """Accessors for per-vertex attributes."""

    def attribute(self, slot: GeometrySlot, geometry_index: int = 0) -> ShaderValue:
        return value_of_type(VertexInput(slot, geometry_index), slot.value_type)

    def position(self, geometry_index: int = 0) -> Vec3:
        return Vec3(VertexInput(GeometrySlot.POSITION, geometry_index))

    def tex_coord0(self, geometry_index: int = 0) -> Vec2:
        return Vec2(VertexInput(GeometrySlot.TEX_COORD0, geometry_index))

    def tex_coord1(self, geometry_index: int = 0) -> Vec2:
        return Vec2(VertexInput(GeometrySlot.TEX_COORD1, geometry_index))

    def normal(self, geometry_index: int = 0) -> Vec3:
        return Vec3(VertexInput(GeometrySlot.NORMAL, geometry_index))

    def tangent(self, geometry_index: int = 0) -> Vec3:
        return Vec3(VertexInput(GeometrySlot.TANGENT, geometry_index))

    def color(self, geometry_index: int = 0) -> Vec4:
        return Vec4(VertexInput(GeometrySlot.COLOR, geometry_index))


class VertexOutputs:
    """Built-in outputs and named pass-throughs of the vertex stage."""

    def __init__(self) -> None:
        self._position: ShaderValue | None = None
        self._point_size: ShaderValue | None = None
        self._named: dict[str, ShaderValue] = {}

    @property
    def position(self) -> Vec4:
        return Vec4(VertexOutPosition())

    @position.setter
    def position(self, value: ShaderValue) -> None:
        if value.value_type != ValueType.FLOAT4:
            raise ContractViolation(
                f"Vertex position must be FLOAT4, got {value.value_type.name}"
            )
        self._position = value

    @property
    def point_size(self) -> Scalar:
        return Scalar(VertexOutPointSize(), ValueType.FLOAT1)

    @point_size.setter
    def point_size(self, value: ShaderValue) -> None:
        if value.value_type != ValueType.FLOAT1:
            raise ContractViolation(
                f"Point size must be FLOAT1, got {value.value_type.name}"
            )
        self._point_size = value

    def __setitem__(self, name: str, value: ShaderValue) -> None:
        _check_name(name, "output")
        existing = self._named.get(name)
        if existing is not None and existing.value_type != value.value_type:
            raise ContractViolation(
                f"Output '{name}' is already {existing.value_type.name}, "
                f"cannot assign {value.value_type.name}"
            )
        self._named[name] = value

    def __getitem__(self, name: str) -> ShaderValue:
        """Read a named output back as the interpolated variable."""
        if name not in self._named:
            raise KeyError(f"Vertex output '{name}' has not been assigned")
        return value_of_type(VertexOut(name), self._named[name].value_type)

    def __contains__(self, name: object) -> bool:
        return name in self._named

    def named(self) -> dict[str, ShaderValue]:
        return dict(self._named)

    def types(self) -> dict[str, ValueType]:
        return {name: value.value_type for name, value in self._named.items()}


class VertexShader(ShaderDocument):
    """Document describing the vertex stage of a program."""

    stage = ShaderStage.VERTEX

    def __init__(self) -> None:
        super().__init__()
        self.input = VertexInputs()
        self.output = VertexOutputs()

    @property
    def model_matrix(self) -> Mat4:
        return Mat4(BuiltinUniform(BuiltinMatrix.MODEL))

    @property
    def view_matrix(self) -> Mat4:
        return Mat4(BuiltinUniform(BuiltinMatrix.VIEW))

    @property
    def projection_matrix(self) -> Mat4:
        return Mat4(BuiltinUniform(BuiltinMatrix.PROJECTION))

    def assignments(self) -> list[tuple[ValueRepresentation, ShaderValue]]:
        roots: list[tuple[ValueRepresentation, ShaderValue]] = []
        if self.output._position is not None:
            roots.append((VertexOutPosition(), self.output._position))
        if self.output._point_size is not None:
            roots.append((VertexOutPointSize(), self.output._point_size))
        for name, value in self.output._named.items():
            roots.append((VertexOut(name), value))
        return roots


# Fragment stage


class FragmentInputs:
    """Named values the fragment stage expects from the vertex stage."""

    def __init__(self) -> None:
        self._named: dict[str, ShaderValue] = {}

    def named(
        self,
        name: str,
        as_type: type[ShaderValue],
        scalar_type: ScalarType = ScalarType.FLOAT,
    ) -> ShaderValue:
        """Declare or return the named input ``name``."""
        _check_name(name, "input")
        value_type = _shape_type(as_type, scalar_type)
        existing = self._named.get(name)
        if existing is not None:
            if type(existing) is as_type and existing.value_type == value_type:
                return existing
            raise ContractViolation(
                f"Input '{name}' is already declared as "
                f"{existing.value_type.name}, cannot redeclare as {value_type.name}"
            )
        value = as_type(FragmentIn(name), value_type)
        self._named[name] = value
        return value

    def __getitem__(self, name: str) -> ShaderValue:
        return self._named[name]

    def __contains__(self, name: object) -> bool:
        return name in self._named

    def named_types(self) -> dict[str, ValueType]:
        return {name: value.value_type for name, value in self._named.items()}


class FragmentOutputs:
    """Built-in outputs of the fragment stage."""

    def __init__(self) -> None:
        self._color: ShaderValue | None = None

    @property
    def color(self) -> Vec4:
        return Vec4(FragmentOutColor())

    @color.setter
    def color(self, value: ShaderValue) -> None:
        if value.value_type != ValueType.FLOAT4:
            raise ContractViolation(
                f"Fragment color must be FLOAT4, got {value.value_type.name}"
            )
        self._color = value


class FragmentShader(ShaderDocument):
    """Document describing the fragment stage of a program."""

    stage = ShaderStage.FRAGMENT

    def __init__(self) -> None:
        super().__init__()
        self.input = FragmentInputs()
        self.output = FragmentOutputs()

    def assignments(self) -> list[tuple[ValueRepresentation, ShaderValue]]:
        if self.output._color is None:
            return []
        return [(FragmentOutColor(), self.output._color)]
