"""Exception hierarchy for BugBlaze.

Every error that the CLI renders as a friendly message derives from
``BugBlazeError``; anything else is a programming error and is allowed to
propagate.
"""

from __future__ import annotations


class BugBlazeError(Exception):
    """Base class for handled BugBlaze failures.

    Attributes:
        hint: Optional follow-up suggestion shown under the error message.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        self.hint = hint
        super().__init__(message)


class ConfigMissing(BugBlazeError):
    """Raised when no usable API key is configured."""

    def __init__(self, message: str = "API key not found in config.") -> None:
        super().__init__(
            message,
            hint="Set your Groq API key with: bugblaze config set apikey <your-api-key>",
        )


class ConfigError(BugBlazeError):
    """Raised when the config file exists but cannot be read or parsed."""


class GatewayFailure(BugBlazeError):
    """Raised when the completion gateway returns an error.

    Attributes:
        kind: ``"auth"``, ``"network"``, ``"http"`` or ``"unexpected"``.
    """

    def __init__(self, message: str, kind: str = "unexpected") -> None:
        self.kind = kind
        hint = None
        if kind == "auth":
            hint = "Check your API key (get one at https://console.groq.com)."
        super().__init__(message, hint=hint)


class MissingSectionsError(BugBlazeError):
    """Raised when generated text lacks the markers needed to parse it.

    Attributes:
        missing: The section markers that could not be found.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Generated output is missing required sections: {', '.join(missing)}",
            hint="Try again or rephrase the project description.",
        )


class EmptyResultError(BugBlazeError):
    """Raised when the generated output parsed but described no files."""

    def __init__(self) -> None:
        super().__init__("No files were written: the generated output contained no file blocks.")


class WriteFailure(BugBlazeError):
    """A single folder or file could not be written.

    Attributes:
        path: The relative path that failed.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not write {path}: {reason}")


class SourceReadError(BugBlazeError):
    """Raised when a source file given on the command line cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not read the file {path}: {reason}")


class ToolchainMissing(BugBlazeError):
    """Raised when the external checker for a language is not installed.

    Attributes:
        tool: The executable that could not be run.
    """

    def __init__(self, tool: str, language: str, install_hint: str) -> None:
        self.tool = tool
        super().__init__(
            f"Checking {language} files needs `{tool}`, which was not found.",
            hint=install_hint,
        )


class UnsupportedLanguageError(BugBlazeError):
    """Raised for files whose extension has no diagnostic adapter."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Unsupported file extension: {path}",
            hint="Supported: .js, .ts, .py, .java, .jsx, .tsx",
        )
