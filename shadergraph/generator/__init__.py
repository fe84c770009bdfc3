from enum import Enum, auto

from shadergraph.generator.base import (
    Assignment,
    CodeGenerator,
    Declaration,
    GeneratedSource,
    StageScratch,
)
from shadergraph.generator.formatting import add_header_comments, add_line_numbers
from shadergraph.generator.glsl import GLSLCodeGenerator, GLSLVersion


class TargetType(Enum):
    """Supported code generation targets."""

    GLSL_ES300 = auto()
    GLSL_CORE330 = auto()

    def create(self) -> CodeGenerator:
        """Create a generator instance for this target."""
        versions: dict[TargetType, GLSLVersion] = {
            TargetType.GLSL_ES300: GLSLVersion.V300_ES,
            TargetType.GLSL_CORE330: GLSLVersion.V330_CORE,
        }
        return GLSLCodeGenerator(versions[self])


# Default target
DEFAULT_TARGET = TargetType.GLSL_ES300


def create_generator(target: TargetType = DEFAULT_TARGET) -> CodeGenerator:
    """Create a generator for ``target``.

    Args:
        target: The target to generate code for

    Returns:
        A fresh generator, safe to use for one generation at a time
    """
    return target.create()


__all__ = [
    "Assignment",
    "CodeGenerator",
    "Declaration",
    "DEFAULT_TARGET",
    "GeneratedSource",
    "GLSLCodeGenerator",
    "GLSLVersion",
    "StageScratch",
    "TargetType",
    "add_header_comments",
    "add_line_numbers",
    "create_generator",
]
