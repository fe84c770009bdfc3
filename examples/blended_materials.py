"""Blended Materials Example

Blends two material channels by a custom uniform, and switches to a flat
highlight color for instances whose index is below a threshold.

Key concepts demonstrated:
1. Interpolating between values with lerp
2. Comparisons and branches
3. Scaling and offsetting texture coordinates with channel properties
4. Reading the instance index in the fragment stage

To run this example:
    shadergraph export examples/blended_materials.py --target core330
"""

from shadergraph import (
    FragmentShader,
    GeometrySlot,
    InputAttribute,
    Scalar,
    ScalarType,
    Vec2,
    Vec4,
    VertexShader,
    literal,
)


def build_program():
    vertex = VertexShader()
    world = vertex.model_matrix * Vec4.construct(vertex.input.position(), literal(1.0))
    vertex.output.position = vertex.projection_matrix * (vertex.view_matrix * world)
    vertex.output.point_size = vertex.uniform("pointSize")
    vertex.output["uv"] = vertex.input.tex_coord0()

    fragment = FragmentShader()
    uv = fragment.input.named("uv", Vec2)
    base = fragment.channel(0)
    detail = fragment.channel(1)

    base_color = base.texture.sample(uv * base.scale + base.offset) * base.color
    detail_color = detail.texture.sample(uv * detail.scale + detail.offset)
    blended = base_color.lerp(detail_color, fragment.uniform("blend"))

    threshold = fragment.uniform("highlighted", Scalar, ScalarType.INT)
    highlight = fragment.uniform("highlight", Vec4)
    fragment.output.color = fragment.instance_id.less(threshold).select(
        highlight, blended
    )

    attributes = [
        InputAttribute(GeometrySlot.POSITION),
        InputAttribute(GeometrySlot.TEX_COORD0),
    ]
    return vertex, fragment, attributes
