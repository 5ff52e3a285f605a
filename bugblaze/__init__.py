"""BugBlaze -- syntax diagnostics and AI-assisted code help from the terminal."""

__version__ = "1.0.0"
