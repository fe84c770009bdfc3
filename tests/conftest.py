"""
Pytest configuration and shared fixtures.

The ``textured_program`` fixture is a small but complete program: a vertex
stage transforming positions into clip space and passing texture coordinates
through, and a fragment stage sampling the first material channel.
"""

import pytest

from shadergraph import (
    FragmentShader,
    GeometrySlot,
    GLSLCodeGenerator,
    GLSLVersion,
    InputAttribute,
    Vec2,
    Vec4,
    VertexShader,
    literal,
)


@pytest.fixture
def generator():
    """Fixture providing a GLSL ES 3.0 generator."""
    return GLSLCodeGenerator(GLSLVersion.V300_ES)


@pytest.fixture
def vertex():
    return VertexShader()


@pytest.fixture
def fragment():
    return FragmentShader()


@pytest.fixture
def textured_program():
    """Fixture providing (vertex, fragment, attributes) of a textured mesh."""
    vertex = VertexShader()
    position = vertex.input.position()
    uv = vertex.input.tex_coord0()
    view_projection = vertex.projection_matrix * vertex.view_matrix
    world = view_projection * vertex.model_matrix
    vertex.output.position = world * Vec4.construct(position, literal(1.0))
    vertex.output["uv"] = uv

    fragment = FragmentShader()
    uv_in = fragment.input.named("uv", Vec2)
    tint = fragment.uniform("tint", Vec4)
    sampled = fragment.channel(0).texture.sample(uv_in)
    fragment.output.color = sampled * tint

    attributes = [
        InputAttribute(GeometrySlot.POSITION),
        InputAttribute(GeometrySlot.TEX_COORD0),
    ]
    return vertex, fragment, attributes


TEXTURED_VERTEX_SOURCE = """\
#version 300 es
precision highp float;
precision highp int;

uniform mat4 vMtx;
uniform mat4 pMtx;

layout(location = 0) in vec3 iPos0;
layout(location = 1) in vec2 iUV0_0;
layout(location = 2) in mat4 mMtx;
flat out int iid;
out vec2 io_uv;

struct Material {
    vec2 offset;
    vec2 scale;
    vec4 color;
};
uniform Material materials[16];

void main() {
    iid = gl_InstanceID;
    mat4 t0 = pMtx * vMtx;
    mat4 t1 = t0 * mMtx;
    vec4 t2 = vec4(iPos0, 1.0);
    vec4 t3 = t1 * t2;
    gl_Position = t3;
    io_uv = iUV0_0;
}"""

TEXTURED_FRAGMENT_SOURCE = """\
#version 300 es
precision highp float;
precision highp int;

uniform vec4 u0;

flat in int iid;
in vec2 io_uv;
layout(location = 0) out vec4 fClr;

struct Material {
    vec2 offset;
    vec2 scale;
    vec4 color;
};
uniform Material materials[16];
uniform sampler2D materialTextures[16];

void main() {
    vec4 t0 = texture(materialTextures[0], io_uv);
    vec4 t1 = t0 * u0;
    fClr = t1;
}"""


@pytest.fixture
def textured_sources():
    """Fixture providing the expected ES 3.0 source of ``textured_program``."""
    return TEXTURED_VERTEX_SOURCE, TEXTURED_FRAGMENT_SOURCE
