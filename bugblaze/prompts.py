"""Prompt builders for every LLM-backed command.

Each builder returns the ``[system, user]`` message pair sent to the
completion gateway. Chat mode starts from ``chat_system_message`` and grows
its own history.
"""

import textwrap
from pathlib import Path

Message = dict[str, str]

_ASSISTANT = "You are a helpful programming assistant."

_EXPLAIN_SYSTEM = (
    f"{_ASSISTANT} Explain programming errors clearly and concisely and shortly "
    "showing what the error means and how to fix it only."
)

_ANALYZE_SYSTEM = (
    f"{_ASSISTANT} Analyze the provided code for logical or runtime issues and "
    "suggest improvements clearly, concisely and shortly showing why it doesn't "
    "work and how to fix it only."
)

_TESTS_SYSTEM = (
    f"{_ASSISTANT} Write thorough, runnable unit tests using the most common test "
    "framework for the language. Reply with a single fenced code block."
)

_DOCS_SYSTEM = (
    f"{_ASSISTANT} Write clear Markdown documentation for the provided code: "
    "purpose, public API, parameters, return values and a short usage example."
)

_REFACTOR_SYSTEM = (
    f"{_ASSISTANT} Suggest refactorings that improve readability and "
    "maintainability without changing behaviour. Summarise the changes briefly, "
    "then give the complete refactored file in a single fenced code block."
)

_MENTOR_SYSTEM = (
    "You are a patient senior engineer mentoring a junior developer. Review the "
    "code, explain the concepts it uses, point out best practices it follows or "
    "misses, and suggest what to learn next. Be encouraging and concrete."
)

_HEALTH_SYSTEM = (
    f"{_ASSISTANT} Given a summary of syntax diagnostics across a project, write a "
    "short codebase health report: overall status, the most urgent problems, and "
    "a prioritised list of next steps."
)

_CHAT_SYSTEM = (
    f"{_ASSISTANT} Answer questions about code concisely. When the user shares "
    "files, they appear in fenced blocks preceded by their path."
)

_CODEBASE_SYSTEM = (
    "You are an expert software architect. You generate complete, working "
    "starter projects and follow the requested output format exactly."
)

_CODEBASE_FORMAT = textwrap.dedent("""\
    Respond using exactly this format and nothing else:

    ---FOLDERS---
    one/relative/folder/path per line
    ---FILES---
    one relative file path per line
    ---CONTENT---
    ==relative/path/to/file.ext==
    full file content
    ==relative/path/to/next_file.ext==
    full file content

    Rules:
    - All paths are relative to the project root; never use absolute paths or "..".
    - Do not wrap file contents in Markdown code fences.
    - Include every file listed under ---FILES--- in ---CONTENT---.
    """)


def _code_block(code: str, path: str | Path = "") -> str:
    header = f"File: {path}\n\n" if path else ""
    return f"{header}Code:\n{code}"


def explain_error_messages(error_message: str, code: str) -> list[Message]:
    return [
        {"role": "system", "content": _EXPLAIN_SYSTEM},
        {
            "role": "user",
            "content": (
                "Explain this error and how to fix it:\n"
                f"Error: {error_message}\n\n"
                f"{_code_block(code)}\n\n"
                "Provide a clear explanation and show the corrected code example."
            ),
        },
    ]


def analyze_code_messages(path: str | Path, code: str) -> list[Message]:
    return [
        {"role": "system", "content": _ANALYZE_SYSTEM},
        {
            "role": "user",
            "content": (
                "Analyze this code for logical or runtime issues and suggest improvements:\n"
                f"{_code_block(code, path)}\n\n"
                "Provide a detailed explanation of any issues and suggest improvements."
            ),
        },
    ]


def generate_tests_messages(path: str | Path, code: str, language: str) -> list[Message]:
    return [
        {"role": "system", "content": _TESTS_SYSTEM},
        {
            "role": "user",
            "content": (
                f"Generate unit tests for this {language} file:\n"
                f"{_code_block(code, path)}\n\n"
                "Cover normal behaviour, edge cases and error handling."
            ),
        },
    ]


def generate_docs_messages(path: str | Path, code: str) -> list[Message]:
    return [
        {"role": "system", "content": _DOCS_SYSTEM},
        {"role": "user", "content": f"Document this file:\n{_code_block(code, path)}"},
    ]


def refactor_messages(path: str | Path, code: str) -> list[Message]:
    return [
        {"role": "system", "content": _REFACTOR_SYSTEM},
        {"role": "user", "content": f"Refactor this file:\n{_code_block(code, path)}"},
    ]


def mentor_messages(path: str | Path, code: str) -> list[Message]:
    return [
        {"role": "system", "content": _MENTOR_SYSTEM},
        {"role": "user", "content": f"Please mentor me on this file:\n{_code_block(code, path)}"},
    ]


def health_scan_messages(summary: str) -> list[Message]:
    return [
        {"role": "system", "content": _HEALTH_SYSTEM},
        {"role": "user", "content": f"Project diagnostics summary:\n{summary}"},
    ]


def codebase_messages(description: str) -> list[Message]:
    """Ask the model for a whole project in the marker-delimited format."""
    return [
        {"role": "system", "content": _CODEBASE_SYSTEM},
        {
            "role": "user",
            "content": f"Generate a complete codebase for: {description}\n\n{_CODEBASE_FORMAT}",
        },
    ]


def chat_system_message() -> Message:
    return {"role": "system", "content": _CHAT_SYSTEM}
