"""Shared utility functions for BugBlaze.

Provides async command execution, JSON output, name sanitisation, code-fence
extraction and the Rich-based console helpers every command prints through.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run an external tool asynchronously and capture its output.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A return code of ``127``
        means the program could not be found; ``-1`` means it timed out.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except FileNotFoundError:
        return (127, "", f"Command not found: {cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def sanitize_name(name: str) -> str:
    """Convert a free-text project description to a safe directory name.

    * Lowercases the input.
    * Collapses every run of non-alphanumeric characters into one hyphen.
    * Strips leading/trailing hyphens.

    Examples::

        sanitize_name("My Cool App!! 2.0") -> "my-cool-app-2-0"
        sanitize_name("  todo_list  ") -> "todo-list"
    """
    result = re.sub(r"[^a-z0-9]+", "-", name.strip().lower())
    return result.strip("-")


_FENCE_PATTERN = re.compile(r"```[\w+#.-]*[ \t]*\n(.*?)```", re.DOTALL)


def extract_code_block(text: str) -> str:
    """Return the body of the first fenced code block in *text*.

    Falls back to the whole text (stripped) when the model answered without
    a fence.
    """
    match = _FENCE_PATTERN.search(text)
    if match:
        return match.group(1).rstrip() + "\n"
    return text.strip() + "\n"


def mask_secret(value: str) -> str:
    """Show only the first and last four characters of a secret."""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def save_json(data: dict[str, Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON, creating parent directories."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8"
    )


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule announcing a command."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_hint(message: str) -> None:
    """Print a cyan hint, usually a command the user can run next."""
    console.print(f"[cyan]{message}[/cyan]")


def print_llm_response(title: str, text: str) -> None:
    """Render a model answer as Markdown inside a titled panel."""
    console.print()
    console.print(
        Panel(
            Markdown(text.strip() or "_(empty response)_"),
            title=title,
            border_style="blue",
        )
    )
