"""Syntax diagnostics for supported source languages.

BugBlaze has no parser of its own: Python files go through the interpreter's
``compile()``, JavaScript through ``node --check``, TypeScript/TSX/JSX through
the TypeScript compiler and Java through ``javac``. Each adapter turns the
tool's output into ``Diagnostic`` records.
"""

from __future__ import annotations

import re
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field
from rich.markup import escape

from bugblaze.errors import SourceReadError, ToolchainMissing, UnsupportedLanguageError
from bugblaze.utils import console, run_command

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".js": "javascript",
    ".ts": "typescript",
    ".py": "python",
    ".java": "java",
    ".jsx": "jsx",
    ".tsx": "tsx",
}

_NODE_HINT = "Install Node.js from https://nodejs.org."
_TSC_HINT = "Install the TypeScript compiler: npm install -g typescript"
_JAVAC_HINT = "Install a JDK (for example https://adoptium.net)."

_TSC_LINE_PATTERN = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<col>\d+)\):\s+(?P<severity>error|warning)\s+"
    r"(?P<code>TS\d+):\s+(?P<message>.+)$",
    re.MULTILINE,
)
_NODE_LOCATION_PATTERN = re.compile(r"^.+:(\d+)$")
_NODE_ERROR_PATTERN = re.compile(r"^(\w*Error): (.+)$", re.MULTILINE)
_JAVAC_LINE_PATTERN = re.compile(r"^.+?\.java:(\d+): (error|warning): (.+)$")
_CARET_PATTERN = re.compile(r"^\s*\^+\s*$")


class Diagnostic(BaseModel):
    """One problem reported by a language checker."""

    message: str = Field(..., description="Human-readable error message")
    line: int = Field(default=0, ge=0, description="1-based line, 0 when unknown")
    column: int = Field(default=0, ge=0, description="1-based column, 0 when unknown")
    severity: str = Field(default="error")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def detect_language(path: str | Path) -> str | None:
    """Map a file extension to a language key, or ``None`` if unsupported."""
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower())


def read_source(path: str | Path) -> str:
    """Read a source file as UTF-8.

    Raises:
        SourceReadError: If the file is missing or not decodable.
    """
    file_path = Path(path)
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(str(path), str(exc)) from exc


def _caret_column(lines: list[str]) -> int:
    """Return the 1-based column of the first ``^`` marker line, or 0."""
    for line in lines:
        if _CARET_PATTERN.match(line):
            return line.index("^") + 1
    return 0


# ---------------------------------------------------------------------------
# Per-language adapters
# ---------------------------------------------------------------------------


def python_diagnostics(code: str, path: str | Path) -> list[Diagnostic]:
    try:
        compile(code, str(path), "exec", dont_inherit=True)
    except SyntaxError as exc:
        return [
            Diagnostic(
                message=f"{type(exc).__name__}: {exc.msg}",
                line=exc.lineno or 0,
                column=exc.offset or 0,
            )
        ]
    except ValueError as exc:
        # e.g. source containing null bytes
        return [Diagnostic(message=str(exc))]
    return []


def parse_node_output(output: str) -> list[Diagnostic]:
    """Parse the stderr of ``node --check`` into at most one diagnostic."""
    error = _NODE_ERROR_PATTERN.search(output)
    if not error:
        return []
    lines = output.splitlines()
    line_no = 0
    if lines:
        location = _NODE_LOCATION_PATTERN.match(lines[0].strip())
        if location:
            line_no = int(location.group(1))
    return [
        Diagnostic(
            message=f"{error.group(1)}: {error.group(2).strip()}",
            line=line_no,
            column=_caret_column(lines),
        )
    ]


def parse_tsc_output(output: str) -> list[Diagnostic]:
    """Parse ``tsc --pretty false`` output lines."""
    return [
        Diagnostic(
            message=f"{match.group('code')}: {match.group('message').strip()}",
            line=int(match.group("line")),
            column=int(match.group("col")),
            severity=match.group("severity"),
        )
        for match in _TSC_LINE_PATTERN.finditer(output)
    ]


def parse_javac_output(output: str) -> list[Diagnostic]:
    """Parse ``javac`` stderr; the caret line two lines below gives the column."""
    diagnostics: list[Diagnostic] = []
    lines = output.splitlines()
    for index, line in enumerate(lines):
        match = _JAVAC_LINE_PATTERN.match(line)
        if not match:
            continue
        column = _caret_column(lines[index + 1:index + 3])
        diagnostics.append(
            Diagnostic(
                message=match.group(3).strip(),
                line=int(match.group(1)),
                column=column,
                severity=match.group(2),
            )
        )
    return diagnostics


async def javascript_diagnostics(path: Path) -> list[Diagnostic]:
    returncode, stdout, stderr = await run_command(["node", "--check", str(path)])
    if returncode == 127:
        raise ToolchainMissing("node", "JavaScript", _NODE_HINT)
    if returncode == 0:
        return []
    return parse_node_output(stderr) or [Diagnostic(message=stderr or stdout)]


async def typescript_diagnostics(path: Path) -> list[Diagnostic]:
    """Type-check one file with ``tsc``; used for .ts, .tsx and .jsx."""
    cmd = [
        "npx", "--no-install", "tsc",
        "--noEmit", "--allowJs", "--jsx", "preserve",
        "--skipLibCheck", "--pretty", "false",
        "--target", "es2022", "--module", "esnext", "--moduleResolution", "bundler",
        str(path),
    ]
    returncode, stdout, stderr = await run_command(cmd)
    if returncode == 127:
        raise ToolchainMissing("npx", "TypeScript", _NODE_HINT)
    if returncode == 0:
        return []
    diagnostics = parse_tsc_output(stdout) or parse_tsc_output(stderr)
    if not diagnostics:
        raise ToolchainMissing("tsc", "TypeScript", _TSC_HINT)
    return diagnostics


async def java_diagnostics(path: Path) -> list[Diagnostic]:
    with tempfile.TemporaryDirectory(prefix="bugblaze-javac-") as out_dir:
        returncode, stdout, stderr = await run_command(
            ["javac", "-Xlint:none", "-d", out_dir, str(path)]
        )
    if returncode == 127:
        raise ToolchainMissing("javac", "Java", _JAVAC_HINT)
    if returncode == 0:
        return []
    return parse_javac_output(stderr) or [Diagnostic(message=stderr or stdout)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def check_source(code: str, path: str | Path) -> list[Diagnostic]:
    """Return the diagnostics for *code*, read from *path*.

    Raises:
        UnsupportedLanguageError: For unknown file extensions.
        ToolchainMissing: If the external checker is not installed.
    """
    language = detect_language(path)
    if language is None:
        raise UnsupportedLanguageError(str(path))
    file_path = Path(path)
    if language == "python":
        return python_diagnostics(code, file_path)
    if language == "javascript":
        return await javascript_diagnostics(file_path)
    if language == "java":
        return await java_diagnostics(file_path)
    return await typescript_diagnostics(file_path)


async def check_file(path: str | Path) -> list[Diagnostic]:
    """Read *path* and return its diagnostics."""
    code = read_source(path)
    return await check_source(code, path)


def print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    """Print each diagnostic the way ``bugblaze fun`` reports them."""
    for diag in diagnostics:
        label = "Syntax error detected" if diag.severity == "error" else "Warning"
        console.print(f"[bold red]x {label}:[/bold red]")
        console.print(f"[yellow]{escape(diag.message)}[/yellow]")
        if diag.line and diag.column:
            console.print(f"  Line: {diag.line}, Column: {diag.column}")
        elif diag.line:
            console.print(f"  Line: {diag.line}")
