"""Presentation helpers for generated source.

Nothing here is part of the code generation contract: these transforms are
applied to finished source for display or export.
"""

import os

import arrow


def add_line_numbers(source: str) -> str:
    """Prefix every line with its 0-based number, for compiler error messages.

    Numbers are right-aligned in a four character column::

          0 #version 300 es
          1 precision highp float;
    """
    lines = source.split("\n")
    return "\n".join(f"{index} ".rjust(4) + line for index, line in enumerate(lines))


def add_header_comments(
    source: str,
    program_file: str,
    target_name: str,
    stage_name: str,
) -> str:
    """Prepend a comment block describing where the source came from.

    The ``#version`` directive must stay the first line of a GLSL source, so
    the header is inserted right after it.
    """
    from shadergraph import __version__

    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    header = [
        f"// Generated by shadergraph v{__version__}",
        f"// Generation time: {timestamp}",
        f"// Program file: {os.path.basename(program_file)}",
        f"// Target: {target_name}",
        f"// Stage: {stage_name}",
    ]

    first, newline, rest = source.partition("\n")
    if first.startswith("#version"):
        return "\n".join([first, *header]) + newline + rest
    return "\n".join([*header, source])
