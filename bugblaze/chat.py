"""Interactive chat mode.

Each line typed by the user becomes one turn. ``@path`` tokens pull the
named file into that turn as a fenced block, so the model can see the code
being discussed. The conversation history is kept for the whole session.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from rich.markup import escape

from bugblaze import prompts
from bugblaze.commands import ask
from bugblaze.config import AppConfig
from bugblaze.errors import BugBlazeError, ConfigMissing
from bugblaze.utils import console, print_error, print_header, print_hint, print_llm_response, print_warning

EXIT_WORDS = frozenset({"exit", "quit"})

_FILE_TOKEN_PATTERN = re.compile(r"@([^\s@]+)")


def inject_file_context(line: str, base_dir: Path | None = None) -> tuple[str, list[str]]:
    """Append the contents of every ``@path`` file referenced in *line*.

    Returns:
        The message to send and the list of paths that could not be read.
        Unreadable references are left in the text as typed.
    """
    base = base_dir or Path.cwd()
    blocks: list[str] = []
    missing: list[str] = []
    seen: set[str] = set()
    for match in _FILE_TOKEN_PATTERN.finditer(line):
        ref = match.group(1).rstrip(".,;:!?")
        if ref in seen:
            continue
        seen.add(ref)
        path = Path(ref) if Path(ref).is_absolute() else base / ref
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            missing.append(ref)
            continue
        blocks.append(f"{ref}:\n```\n{content.rstrip()}\n```")
    if not blocks:
        return line, missing
    return line + "\n\n" + "\n\n".join(blocks), missing


class ChatSession:
    """One interactive conversation with the model."""

    def __init__(self, config: AppConfig, base_dir: Path | None = None) -> None:
        self.config = config
        self.base_dir = base_dir or Path.cwd()
        self.history: list[dict[str, str]] = [prompts.chat_system_message()]

    async def read_line(self) -> str | None:
        """Prompt for the next line; ``None`` on EOF or Ctrl-C."""
        try:
            return await asyncio.to_thread(console.input, "[bold cyan]you>[/bold cyan] ")
        except (EOFError, KeyboardInterrupt):
            return None

    async def send(self, line: str) -> str:
        """Run one turn. The user message is dropped again if the turn fails."""
        message, missing = inject_file_context(line, self.base_dir)
        for ref in missing:
            print_warning(f"Could not read {escape(ref)}, sending the message without it.")
        self.history.append({"role": "user", "content": message})
        try:
            answer = await ask(self.config, self.history, status="Thinking...")
        except BugBlazeError:
            self.history.pop()
            raise
        self.history.append({"role": "assistant", "content": answer})
        return answer

    async def run(self) -> int:
        """Loop until the user leaves. Returns the number of completed turns."""
        self.config.require_apikey()
        print_header("BugBlaze chat")
        print_hint("Type your question. Use @path/to/file to share a file. Type 'exit' to leave.")

        turns = 0
        while True:
            line = await self.read_line()
            if line is None:
                console.print()
                break
            line = line.strip()
            if not line:
                continue
            if line.lower() in EXIT_WORDS:
                break
            try:
                answer = await self.send(line)
            except ConfigMissing:
                raise
            except BugBlazeError as exc:
                print_error(f"Error: {escape(str(exc))}")
                if exc.hint:
                    print_hint(exc.hint)
                continue
            print_llm_response("BugBlaze", answer)
            turns += 1

        console.print("[dim]Goodbye![/dim]")
        return turns


async def cmd_chat(config: AppConfig) -> int:
    return await ChatSession(config).run()
