"""
Line-oriented builder for the small Swift files generated as test scaffolds.
"""

from __future__ import annotations


class SwiftFileBuilder:
    """
    Accumulates Swift source text line by line.

    Only the declarations needed for test scaffolds are supported: import
    lines, blank-line separated sections and empty class declarations.
    """

    def __init__(self, buffer: str = "") -> None:
        self._buffer = buffer

    def build(self) -> str:
        return self._buffer

    # Lines

    def line(self, text: str = "") -> None:
        """Append ``text`` with trailing whitespace removed, then a line break."""
        self._buffer += text.rstrip() + "\n"

    def lines(self, *lines: str) -> None:
        for text in lines:
            self.line(text)

    def ensure_empty_line_separation(self) -> None:
        """
        Make the buffer end in an empty line.

        Does nothing while the buffer is still on its first line.
        """
        if "\n" not in self._buffer:
            return
        if self._buffer.endswith("\n\n"):
            return
        if self._buffer.endswith("\n"):
            self._buffer += "\n"
            return
        self._buffer += "\n\n"

    # Declarations

    def put_import(self, module_name: str, testable: bool = False) -> None:
        prefix = "@testable " if testable else ""
        self.line(f"{prefix}import {module_name}")

    def put_imports(self, module_names: list[str]) -> None:
        for module_name in module_names:
            self.put_import(module_name)

    def put_empty_class(self, name: str, inheritance: list[str] | None = None) -> None:
        """Emit ``class Name: A, B {``, an empty line and the closing brace."""
        header = f"class {name}"
        if inheritance:
            header += ": " + ", ".join(inheritance)
        self.line(f"{header} {{")
        self.line()
        self.line("}")

    def section(self) -> _Section:
        """Context manager that separates its contents with empty lines."""
        return _Section(self)


class _Section:
    def __init__(self, builder: SwiftFileBuilder) -> None:
        self._builder = builder

    def __enter__(self) -> SwiftFileBuilder:
        self._builder.ensure_empty_line_separation()
        return self._builder

    def __exit__(self, *exc_info: object) -> None:
        self._builder.ensure_empty_line_separation()
