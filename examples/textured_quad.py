"""Textured Quad Example

This example builds the smallest useful program: a mesh transformed into clip
space by the model, view and projection matrices, textured with the first
material channel and tinted by a custom uniform.

Key concepts demonstrated:
1. Reading vertex attributes and the built-in matrices
2. Passing a named value from the vertex stage to the fragment stage
3. Sampling a material texture
4. Declaring custom uniforms

To run this example:
    # Print both stages
    shadergraph export examples/textured_quad.py
    # Write textured_quad.vert and textured_quad.frag
    shadergraph export examples/textured_quad.py -o build/
    # Regenerate on every save
    shadergraph watch examples/textured_quad.py -o build/
"""

from shadergraph import (
    FragmentShader,
    GeometrySlot,
    InputAttribute,
    Vec2,
    Vec4,
    VertexShader,
    literal,
)


def build_program():
    """Build the vertex shader, fragment shader and attribute bindings."""
    vertex = VertexShader()
    position = Vec4.construct(vertex.input.position(), literal(1.0))
    view_projection = vertex.projection_matrix * vertex.view_matrix
    vertex.output.position = view_projection * vertex.model_matrix * position
    vertex.output["uv"] = vertex.input.tex_coord0()

    fragment = FragmentShader()
    uv = fragment.input.named("uv", Vec2)
    tint = fragment.uniform("tint", Vec4)
    fragment.output.color = fragment.channel(0).texture.sample(uv) * tint

    attributes = [
        InputAttribute(GeometrySlot.POSITION),
        InputAttribute(GeometrySlot.TEX_COORD0),
    ]
    return vertex, fragment, attributes
