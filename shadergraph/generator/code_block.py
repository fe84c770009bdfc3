"""Line-oriented builder for generated source."""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterable, Iterator


@dataclass
class CodeBlock:
    """Manages code block generation."""

    indent: str = "    "
    indent_level: int = 0
    lines: list[str] = field(default_factory=list)

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Context manager for a braced block opened by ``header``."""
        self.add_line(f"{header} {{")
        self.indent_level += 1
        try:
            yield
        finally:
            self.indent_level -= 1
            self.add_line("}")

    def add_line(self, line: str = "") -> None:
        """Add line with proper indentation.

        Empty lines are collapsed so sections that turn out empty leave a
        single separator.
        """
        if not line:
            if self.lines and self.lines[-1]:
                self.lines.append("")
            return

        self.lines.append(f"{self.indent * self.indent_level}{line}")

    def add_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.add_line(line)

    def get_code(self) -> str:
        """Get generated code."""
        return "\n".join(self.lines)
