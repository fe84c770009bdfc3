"""Command line interface for shadergraph.

This module loads a Python file that builds a shader program, generates the
vertex and fragment source for it and writes or prints the result.
"""

import importlib.util
import os
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, TypeVar, cast

import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from shadergraph.document import FragmentShader, InputAttribute, VertexShader
from shadergraph.errors import ShaderGraphError
from shadergraph.generator import (
    DEFAULT_TARGET,
    GeneratedSource,
    TargetType,
    add_header_comments,
    add_line_numbers,
)

F = TypeVar("F", bound=Callable[..., Any])


def typed_command(app_command: Any) -> Callable[[F], F]:
    """Keep the decorated function's type through a typer command decorator."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="shadergraph",
    help=(
        "Generate vertex and fragment shader source from shader graphs. "
        "Commands: export, watch."
    ),
    add_completion=False,
)

TARGET_NAMES: dict[str, TargetType] = {
    "es300": TargetType.GLSL_ES300,
    "core330": TargetType.GLSL_CORE330,
}

FORMATS = ("plain", "numbered", "commented")

Program = tuple[VertexShader, FragmentShader, list[InputAttribute]]


def _load_program_module(file_path: str) -> Any:
    """Load a Python file as a module.

    Args:
        file_path: Path to the Python file

    Returns:
        Loaded module
    """
    abs_path = os.path.abspath(file_path)
    module_dir = os.path.dirname(abs_path)
    module_name = os.path.splitext(os.path.basename(abs_path))[0]

    # Program files may import siblings from their own directory
    if module_dir not in sys.path:
        sys.path.insert(0, module_dir)

    spec = importlib.util.spec_from_file_location(module_name, abs_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load module from {file_path}")

    program_module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(program_module)

    return program_module


def _build_program(module: Any, builder_name: str) -> Program:
    """Call the module's builder function and check what it returns.

    The builder takes no arguments and returns
    ``(vertex_shader, fragment_shader, attributes)``.
    """
    builder = getattr(module, builder_name, None)
    if not callable(builder):
        raise ValueError(f"No builder function '{builder_name}' found in the module")

    result = builder()
    if not isinstance(result, tuple) or len(result) != 3:
        raise ValueError(
            f"'{builder_name}' must return (vertex, fragment, attributes), "
            f"got {type(result).__name__}"
        )

    vertex, fragment, attributes = result
    if not isinstance(vertex, VertexShader) or not isinstance(fragment, FragmentShader):
        raise ValueError(f"'{builder_name}' must return a vertex and fragment shader")
    attributes = list(attributes)
    if not all(isinstance(attribute, InputAttribute) for attribute in attributes):
        raise ValueError("Attributes must be InputAttribute instances")

    logger.info(f"Built program with {len(attributes)} vertex attributes")
    return vertex, fragment, attributes


def _map_target(target: str) -> TargetType:
    """Map a target string to a target type."""
    target_type = TARGET_NAMES.get(target.lower())
    if target_type is None:
        logger.warning(
            f"Unknown target: {target}. Using {DEFAULT_TARGET.name} as default."
        )
        return DEFAULT_TARGET
    return target_type


def _format_source(
    source: str,
    format_type: str,
    program_file: str,
    target_type: TargetType,
    stage_name: str,
) -> str:
    """Format generated source for export.

    Args:
        source: Generated stage source
        format_type: Format type (plain, numbered, commented)
        program_file: Python file the program was built from
        target_type: Target the source was generated for
        stage_name: Name of the stage the source belongs to

    Returns:
        Formatted source
    """
    if format_type == "numbered":
        return add_line_numbers(source)
    if format_type == "commented":
        return add_header_comments(source, program_file, target_type.name, stage_name)
    if format_type != "plain":
        logger.warning(f"Unknown format: {format_type}. Using plain.")
    return source


def _generate_program(
    program_file: str, target: str, builder_name: str, format_type: str
) -> GeneratedSource:
    """Load, build and generate a program, returning formatted source."""
    target_type = _map_target(target)
    module = _load_program_module(program_file)
    vertex, fragment, attributes = _build_program(module, builder_name)

    generator = target_type.create()
    logger.info(f"Generating {target_type.name} source for {program_file}")
    sources = generator.generate(vertex, fragment, attributes)

    return GeneratedSource(
        _format_source(
            sources.vertex_source, format_type, program_file, target_type, "vertex"
        ),
        _format_source(
            sources.fragment_source, format_type, program_file, target_type, "fragment"
        ),
    )


def _write_program(
    program_file: str, sources: GeneratedSource, output_dir: Path
) -> tuple[Path, Path]:
    """Write both stages next to each other in ``output_dir``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(program_file).stem
    vertex_path = output_dir / f"{stem}.vert"
    fragment_path = output_dir / f"{stem}.frag"

    with open(vertex_path, "w") as f:
        f.write(sources.vertex_source)
    with open(fragment_path, "w") as f:
        f.write(sources.fragment_source)

    logger.info(f"Wrote {vertex_path} and {fragment_path}")
    return vertex_path, fragment_path


# Options shared by export and watch
PROGRAM_FILE_ARG = typer.Argument(..., help="Python file building the shader program")
TARGET_OPTION = typer.Option(
    "es300", "--target", "-t", help="Target dialect (es300, core330)"
)
BUILDER_OPTION = typer.Option(
    "build_program", "--builder", "-b", help="Function returning the program"
)
FORMAT_OPTION = typer.Option(
    "plain", "--format", "-f", help="Source format (plain, numbered, commented)"
)


@typed_command(app.command("export"))
def export_program(
    program_file: str = PROGRAM_FILE_ARG,
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for .vert/.frag files"
    ),
    target: str = TARGET_OPTION,
    builder: str = BUILDER_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Export the vertex and fragment source of a program.

    Without an output directory both stages are printed to stdout.

    Example: shadergraph export examples/textured_quad.py -o build/
    """
    try:
        sources = _generate_program(program_file, target, builder, format)
    except (ShaderGraphError, ValueError, ImportError) as e:
        logger.error(f"Failed to generate {program_file}: {e}")
        raise typer.Exit(code=1) from e

    if output_dir is None:
        typer.echo("// Vertex stage")
        typer.echo(sources.vertex_source)
        typer.echo("")
        typer.echo("// Fragment stage")
        typer.echo(sources.fragment_source)
        return

    _write_program(program_file, sources, output_dir)


class ProgramChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler regenerating a program whenever its file changes."""

    def __init__(
        self,
        program_file: str,
        output_dir: Path,
        target: str,
        builder: str,
        format_type: str,
    ):
        """Initialize program change handler.

        Args:
            program_file: Path to program file
            output_dir: Directory receiving the generated files
            target: Target dialect
            builder: Builder function name
            format_type: Source format
        """
        self.program_file = program_file
        self.output_dir = output_dir
        self.target = target
        self.builder = builder
        self.format_type = format_type

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if event.src_path == os.path.abspath(self.program_file):
            logger.info(f"Detected changes in {self.program_file}")
            self.regenerate()

    def regenerate(self) -> bool:
        """Generate and write the program, logging instead of raising.

        Returns:
            True when the files were written
        """
        try:
            sources = _generate_program(
                self.program_file, self.target, self.builder, self.format_type
            )
        except (ShaderGraphError, ValueError, ImportError) as e:
            logger.error(f"Error regenerating {self.program_file}: {e}")
            return False
        _write_program(self.program_file, sources, self.output_dir)
        return True


@typed_command(app.command("watch"))
def watch_program(
    program_file: str = PROGRAM_FILE_ARG,
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", help="Directory for .vert/.frag files"
    ),
    target: str = TARGET_OPTION,
    builder: str = BUILDER_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Watch a program file and regenerate its source on changes.

    Example: shadergraph watch examples/textured_quad.py -o build/
    """
    abs_program_file = os.path.abspath(program_file)
    handler = ProgramChangeHandler(
        abs_program_file, output_dir, target, builder, format
    )
    handler.regenerate()

    # Watch the file's directory, not the file itself
    observer = watchdog.observers.Observer()
    observer.schedule(handler, path=os.path.dirname(abs_program_file), recursive=False)
    observer.start()
    logger.info(f"Watching {program_file} (press Ctrl+C to stop)")

    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()
