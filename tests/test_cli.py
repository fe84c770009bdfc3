"""Tests for the shadergraph command-line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from shadergraph.main import ProgramChangeHandler, app

runner = CliRunner()

PROGRAM_SOURCE = """
from shadergraph import (
    FragmentShader,
    GeometrySlot,
    InputAttribute,
    Vec4,
    VertexShader,
    literal,
)


def build_program():
    vertex = VertexShader()
    vertex.output.position = Vec4.construct(vertex.input.position(), literal(1.0))

    fragment = FragmentShader()
    fragment.output.color = fragment.channel(0).color

    return vertex, fragment, [InputAttribute(GeometrySlot.POSITION)]


def build_broken_program():
    vertex, fragment, attributes = build_program()
    fragment.input.named("missing", Vec4)
    return vertex, fragment, attributes


def build_nothing():
    return None
"""


@pytest.fixture
def program_file(tmp_path):
    """Create a program file building a flat colored mesh."""
    path = tmp_path / "quad.py"
    path.write_text(PROGRAM_SOURCE)
    return path


def test_help():
    """Test that the CLI help command works."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "export" in result.stdout
    assert "watch" in result.stdout


def test_export_to_stdout(program_file):
    """Test export to stdout (no output directory)."""
    result = runner.invoke(app, ["export", str(program_file)])

    assert result.exit_code == 0
    assert "// Vertex stage" in result.stdout
    assert "// Fragment stage" in result.stdout
    assert "#version 300 es" in result.stdout
    assert "gl_Position = t0;" in result.stdout
    assert "fClr = materials[0].color;" in result.stdout


def test_export_to_directory(program_file, tmp_path):
    """Test export writes one file per stage."""
    output_dir = tmp_path / "build"

    result = runner.invoke(app, ["export", str(program_file), "-o", str(output_dir)])

    assert result.exit_code == 0
    vertex_source = (output_dir / "quad.vert").read_text()
    fragment_source = (output_dir / "quad.frag").read_text()
    assert vertex_source.startswith("#version 300 es")
    assert "layout(location = 1) in mat4 mMtx;" in vertex_source
    assert "uniform sampler2D materialTextures[16];" in fragment_source


def test_export_core_target(program_file):
    result = runner.invoke(app, ["export", str(program_file), "--target", "core330"])

    assert result.exit_code == 0
    assert "#version 330 core" in result.stdout
    assert "precision" not in result.stdout


def test_export_unknown_target_uses_default(program_file):
    result = runner.invoke(app, ["export", str(program_file), "-t", "hlsl"])

    assert result.exit_code == 0
    assert "#version 300 es" in result.stdout


def test_export_numbered(program_file):
    result = runner.invoke(app, ["export", str(program_file), "--format", "numbered"])

    assert result.exit_code == 0
    assert "  0 #version 300 es" in result.stdout


def test_export_commented(program_file, tmp_path):
    output_dir = tmp_path / "build"

    result = runner.invoke(
        app, ["export", str(program_file), "-o", str(output_dir), "-f", "commented"]
    )

    assert result.exit_code == 0
    lines = (output_dir / "quad.frag").read_text().split("\n")
    assert lines[0] == "#version 300 es"
    assert "// Program file: quad.py" in lines
    assert "// Stage: fragment" in lines


def test_export_builder_returning_nothing(program_file):
    result = runner.invoke(
        app, ["export", str(program_file), "--builder", "build_nothing"]
    )
    assert result.exit_code == 1


def test_export_missing_builder(program_file):
    result = runner.invoke(app, ["export", str(program_file), "-b", "build_scene"])
    assert result.exit_code == 1


def test_export_link_error(program_file, tmp_path):
    output_dir = tmp_path / "build"

    result = runner.invoke(
        app,
        ["export", str(program_file), "-b", "build_broken_program", "-o", str(output_dir)],
    )

    assert result.exit_code == 1
    assert not output_dir.exists()


class TestProgramChangeHandler:
    """Test regeneration used by the watch command."""

    def test_regenerate_writes_files(self, program_file, tmp_path):
        output_dir = tmp_path / "watched"
        handler = ProgramChangeHandler(
            str(program_file), output_dir, "es300", "build_program", "plain"
        )

        assert handler.regenerate()
        assert (output_dir / "quad.vert").exists()
        assert (output_dir / "quad.frag").exists()

    def test_regenerate_reports_failure(self, program_file, tmp_path):
        output_dir = tmp_path / "watched"
        handler = ProgramChangeHandler(
            str(program_file), output_dir, "es300", "build_broken_program", "plain"
        )

        assert not handler.regenerate()
        assert not output_dir.exists()

    def test_regenerate_picks_up_changes(self, program_file, tmp_path):
        output_dir = tmp_path / "watched"
        handler = ProgramChangeHandler(
            str(program_file), output_dir, "core330", "build_program", "plain"
        )
        handler.regenerate()

        program_file.write_text(
            PROGRAM_SOURCE.replace("channel(0).color", "channel(12).color")
        )
        handler.regenerate()

        fragment_source = Path(output_dir / "quad.frag").read_text()
        assert "fClr = materials[12].color;" in fragment_source
