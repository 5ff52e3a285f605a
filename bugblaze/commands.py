"""Command handlers for the ``bugblaze`` CLI.

Every handler is a coroutine that receives the ``AppConfig`` loaded once by
the dispatcher. Handled failures are raised as ``BugBlazeError`` subclasses
and rendered by the CLI; handlers only print their own progress and results.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from bugblaze import prompts
from bugblaze.config import SETTABLE_KEYS, AppConfig
from bugblaze.diagnostics import (
    LANGUAGE_BY_EXTENSION,
    Diagnostic,
    check_file,
    check_source,
    detect_language,
    print_diagnostics,
    read_source,
)
from bugblaze.errors import (
    BugBlazeError,
    EmptyResultError,
    GatewayFailure,
    SourceReadError,
    ToolchainMissing,
)
from bugblaze.groq_client import GroqClient
from bugblaze.premium import check_license
from bugblaze.scaffolder import MaterializeReport, Materializer, parse_descriptor
from bugblaze.utils import (
    console,
    extract_code_block,
    mask_secret,
    print_header,
    print_hint,
    print_llm_response,
    print_success,
    print_summary_table,
    print_warning,
)

GENERATE_TYPES = ("codebase", "tests", "docs", "refactor")

# Directories never scanned by health-scan.
_SKIP_DIRS = frozenset({
    ".git", "node_modules", ".venv", "venv", "env", "__pycache__",
    "dist", "build", ".next", ".tox", ".mypy_cache", ".pytest_cache", "target",
})


# ---------------------------------------------------------------------------
# Gateway helper
# ---------------------------------------------------------------------------


async def ask(
    config: AppConfig,
    messages: list[dict[str, str]],
    max_tokens: int | None = None,
    status: str = "Thinking...",
) -> str:
    """Send *messages* to the completion gateway and return the answer text.

    Raises:
        ConfigMissing: If no API key is configured (checked before any request).
        GatewayFailure: If the request fails.
    """
    client = GroqClient(config.require_apikey(), config.groq)
    with console.status(status):
        response = await client.complete(messages, max_tokens=max_tokens)
    if not response.success:
        raise GatewayFailure(response.error or "Completion failed.", response.error_kind or "unexpected")
    return response.text


# ---------------------------------------------------------------------------
# fun / analyze / mentor
# ---------------------------------------------------------------------------


async def cmd_fun(config: AppConfig, file: str, explain: bool = False) -> list[Diagnostic]:
    """Detect syntax errors in *file*; optionally explain the first one."""
    code = read_source(file)
    console.print(f"Checking [bold]{escape(file)}[/bold] ({detect_language(file) or 'unknown'})...")
    diagnostics = await check_source(code, file)

    if not diagnostics:
        print_success("No syntax errors found.")
        return diagnostics

    print_diagnostics(diagnostics)
    if explain:
        text = await ask(
            config,
            prompts.explain_error_messages(diagnostics[0].message, code),
            status="Analyzing error...",
        )
        print_llm_response("AI Explanation", text)
    else:
        print_hint("Run again with --explain to get an AI explanation.")
    return diagnostics


async def cmd_analyze(config: AppConfig, file: str) -> str:
    """Ask the model for logical or runtime issues in *file*."""
    code = read_source(file)
    text = await ask(
        config,
        prompts.analyze_code_messages(file, code),
        status="Analyzing code for logical or runtime issues...",
    )
    print_llm_response("AI Analysis", text)
    return text


async def cmd_mentor(config: AppConfig, file: str) -> str:
    """Get a mentoring review of *file*."""
    code = read_source(file)
    text = await ask(
        config,
        prompts.mentor_messages(file, code),
        max_tokens=config.groq.max_tokens * 3,
        status="Reviewing your code...",
    )
    print_llm_response("Mentor", text)
    return text


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


def output_path_for_tests(source: Path) -> Path:
    """Where ``generate tests`` writes the tests for *source*."""
    language = detect_language(source)
    if language == "python":
        return source.with_name(f"test_{source.stem}.py")
    if language == "java":
        return source.with_name(f"{source.stem}Test.java")
    return source.with_name(f"{source.stem}.test{source.suffix}")


def _write_output(path: Path, content: str) -> Path:
    if path.exists():
        print_warning(f"Overwriting {escape(str(path))}")
    path.write_text(content, encoding="utf-8")
    print_success(f"Wrote {escape(str(path))}")
    return path


async def generate_codebase(
    config: AppConfig,
    description: str,
    destination: str | Path | None = None,
) -> MaterializeReport:
    """Generate a project from *description* and write it under *destination*.

    Raises:
        MissingSectionsError: If the answer cannot be parsed (nothing is written).
        EmptyResultError: If the answer describes no files (nothing is written).
    """
    text = await ask(
        config,
        prompts.codebase_messages(description),
        max_tokens=config.groq.codebase_max_tokens,
        status="Generating codebase...",
    )
    descriptor = parse_descriptor(text, description=description)
    if descriptor.is_empty:
        raise EmptyResultError()

    target = Path(destination) if destination else Path.cwd()
    console.print(
        f"Writing {len(descriptor.files)} file(s) and {len(descriptor.folders)} folder(s)..."
    )
    return await asyncio.to_thread(Materializer().materialize, descriptor, target)


async def generate_tests(config: AppConfig, file: str) -> Path:
    source = Path(file)
    code = read_source(source)
    language = detect_language(source) or source.suffix.lstrip(".") or "source"
    text = await ask(
        config,
        prompts.generate_tests_messages(source, code, language),
        max_tokens=config.groq.codebase_max_tokens,
        status="Generating tests...",
    )
    return _write_output(output_path_for_tests(source), extract_code_block(text))


async def generate_docs(config: AppConfig, file: str) -> Path:
    source = Path(file)
    code = read_source(source)
    text = await ask(
        config,
        prompts.generate_docs_messages(source, code),
        max_tokens=config.groq.codebase_max_tokens,
        status="Generating documentation...",
    )
    return _write_output(source.with_name(f"{source.stem}.md"), text.strip() + "\n")


async def generate_refactor(config: AppConfig, file: str) -> Path:
    source = Path(file)
    code = read_source(source)
    text = await ask(
        config,
        prompts.refactor_messages(source, code),
        max_tokens=config.groq.codebase_max_tokens,
        status="Preparing refactor suggestions...",
    )
    print_llm_response("Refactor Suggestions", text)
    target = source.with_name(f"{source.stem}.refactored{source.suffix}")
    return _write_output(target, extract_code_block(text))


async def cmd_generate(config: AppConfig, kind: str, target: str) -> Any:
    """Dispatch ``generate <type> <input>``."""
    if kind == "codebase":
        print_header(f"Generating codebase: {target}")
        return await generate_codebase(config, target)
    if kind == "tests":
        return await generate_tests(config, target)
    if kind == "docs":
        return await generate_docs(config, target)
    if kind == "refactor":
        return await generate_refactor(config, target)
    raise BugBlazeError(
        f"Unknown generate type: {kind}",
        hint=f"Choose one of: {', '.join(GENERATE_TYPES)}",
    )


# ---------------------------------------------------------------------------
# health-scan
# ---------------------------------------------------------------------------


def iter_source_files(root: Path) -> list[Path]:
    """Return supported source files under *root*, skipping vendored dirs."""
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)
        for name in sorted(filenames):
            if Path(name).suffix.lower() in LANGUAGE_BY_EXTENSION:
                found.append(Path(dirpath) / name)
    return found


async def scan_files(files: list[Path], root: Path) -> dict[str, dict[str, Any]]:
    """Run diagnostics on every file; a missing toolchain skips its files."""
    results: dict[str, dict[str, Any]] = {}
    missing_tools: set[str] = set()
    for path in files:
        relative = path.relative_to(root).as_posix()
        language = detect_language(path) or "unknown"
        try:
            diagnostics = await check_file(path)
        except ToolchainMissing as exc:
            if exc.tool not in missing_tools:
                print_warning(str(exc))
                missing_tools.add(exc.tool)
            results[relative] = {"language": language, "status": "skipped", "diagnostics": []}
            continue
        except SourceReadError as exc:
            results[relative] = {"language": language, "status": "unreadable", "error": str(exc), "diagnostics": []}
            continue
        results[relative] = {
            "language": language,
            "status": "ok" if not diagnostics else "errors",
            "diagnostics": diagnostics,
        }
    return results


def _health_summary(results: dict[str, dict[str, Any]]) -> str:
    lines = [f"Files scanned: {len(results)}"]
    for path, result in results.items():
        if result["status"] == "errors":
            first = result["diagnostics"][0]
            lines.append(
                f"- {path} ({result['language']}): {len(result['diagnostics'])} issue(s); "
                f"first at line {first.line}: {first.message}"
            )
        elif result["status"] != "ok":
            lines.append(f"- {path}: {result['status']}")
    if len(lines) == 1 or all(r["status"] == "ok" for r in results.values()):
        lines.append("No syntax errors were found.")
    return "\n".join(lines)


async def cmd_health_scan(config: AppConfig, path: str = ".") -> dict[str, dict[str, Any]]:
    """Check every supported file under *path* and ask for a health report."""
    root = Path(path).resolve()
    config.require_apikey()
    print_header(f"Health scan: {root}")

    files = iter_source_files(root)
    if not files:
        print_warning("No supported source files found.")
        return {}

    results = await scan_files(files, root)

    table = Table(title="Syntax health", show_header=True, header_style="bold cyan")
    table.add_column("File", no_wrap=True)
    table.add_column("Language", style="dim")
    table.add_column("Status")
    for relative, result in results.items():
        status = result["status"]
        if status == "ok":
            label = "[green]ok[/green]"
        elif status == "errors":
            label = f"[red]{len(result['diagnostics'])} error(s)[/red]"
        else:
            label = f"[yellow]{status}[/yellow]"
        table.add_row(escape(relative), result["language"], label)
    console.print(table)

    text = await ask(
        config,
        prompts.health_scan_messages(_health_summary(results)),
        max_tokens=config.groq.max_tokens * 2,
        status="Writing health report...",
    )
    print_llm_response("Codebase Health Report", text)
    return results


# ---------------------------------------------------------------------------
# config / init
# ---------------------------------------------------------------------------


def _print_config_usage() -> None:
    console.print("[yellow]Available commands:[/yellow]")
    print_hint("  bugblaze config set apikey <your-groq-api-key>")
    print_hint("  bugblaze config set licensekey <your-license-key>")
    print_hint("  bugblaze config show")
    print_hint("  bugblaze config delete")


async def cmd_config(
    config: AppConfig,
    action: str | None,
    key: str | None = None,
    value: str | None = None,
) -> None:
    """Handle ``config set|show|delete``."""
    if action == "set":
        if key not in SETTABLE_KEYS or not value:
            print_warning("Invalid command")
            console.print("[yellow]Usage:[/yellow]")
            print_hint("  bugblaze config set apikey <your-groq-api-key>")
            print_hint("  bugblaze config set licensekey <your-license-key>")
            return
        config.set_value(key, value)
        if key == "licensekey":
            with console.status("Verifying license..."):
                status = await check_license(value, config.backend_url)
            config.is_premium = status.is_premium
            config.email = status.email
            if status.is_premium:
                print_success(f"Premium license verified{f' for {status.email}' if status.email else ''}.")
            else:
                print_warning("License could not be verified; premium features stay locked.")
        config.save()
        print_success(f"{key} saved successfully!")
        return

    if action == "show":
        stored = AppConfig.read_raw(config.config_path)
        if stored is None:
            print_warning("No configuration file found.")
            return
        values = {
            name: mask_secret(str(setting)) if "key" in name.lower() else str(setting)
            for name, setting in stored.items()
        }
        print_summary_table(values, title="Current Configuration")
        return

    if action == "delete":
        if AppConfig.delete(config.config_path):
            print_success("Configuration deleted successfully!")
        else:
            print_warning("No configuration file found.")
        return

    _print_config_usage()


_COMMAND_HELP = (
    ("bugblaze fun <file> [--explain]", "Detect syntax errors (AI explanation with --explain)"),
    ("bugblaze analyze <file>", "Find logical or runtime issues"),
    ("bugblaze generate codebase <description>", "Scaffold a new project (premium)"),
    ("bugblaze generate tests|docs|refactor <file>", "Generate tests, docs or a refactor (premium)"),
    ("bugblaze health-scan [path]", "Scan a whole project (premium)"),
    ("bugblaze mentor <file>", "Get a mentoring review (premium)"),
    ("bugblaze chat", "Chat about your code, use @path to share files (premium)"),
    ("bugblaze config set apikey <key>", "Set your Groq API key"),
)


async def cmd_init(config: AppConfig) -> bool:
    """Welcome the user, create a config file if needed and report readiness.

    Returns ``True`` when an API key is configured.
    """
    console.print(Panel("[bold green]Welcome to BugBlaze![/bold green]", style="green", expand=False))

    if not config.config_path.exists():
        console.print("[yellow]No configuration found, creating default config file...[/yellow]")
        config.save()
        print_success(f"Created default config at {escape(str(config.config_path))}")

    if not config.has_apikey:
        print_warning("API key not found in config!")
        print_hint("  bugblaze config set apikey <your-api-key>")
        console.print("[dim]Get your API key at: https://console.groq.com[/dim]")
        return False

    print_success("API key found! You are ready to use BugBlaze.")
    table = Table(title="Available commands", show_header=False)
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description")
    for command, description in _COMMAND_HELP:
        table.add_row(escape(command), description)
    console.print(table)
    languages = ", ".join(sorted(LANGUAGE_BY_EXTENSION))
    console.print(f"[dim]Supported file types: {languages}[/dim]")
    return True

