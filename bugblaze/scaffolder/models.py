"""Pydantic v2 models for generated-project descriptors and write reports."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class Dialect(str, Enum):
    """Textual convention the model used to describe a project.

    MARKERS: ``---FOLDERS---`` / ``---FILES---`` / ``---CONTENT---`` with
    ``==path==`` content blocks.
    HEADINGS: ``PROJECT_STRUCTURE:`` tree plus ``FILE_CONTENTS:`` with
    ``// path`` headers.
    """
    MARKERS = "markers"
    HEADINGS = "headings"


class ProjectDescriptor(BaseModel):
    """A parsed project, ready to be written to disk.

    ``root_name`` is empty when a headings-dialect tree has no single top
    folder, meaning the paths are relative to the destination directory itself.
    """
    root_name: str = Field(default="", description="Sanitized project directory name")
    dialect: Dialect = Field(default=Dialect.MARKERS)
    folders: list[str] = Field(
        default_factory=list, description="Relative folder paths in encounter order"
    )
    files: dict[str, str] = Field(
        default_factory=dict, description="Relative file path -> newline-terminated content"
    )

    @property
    def is_empty(self) -> bool:
        return not self.files


class MaterializeReport(BaseModel):
    """Outcome of writing one descriptor to disk."""
    root: Path = Field(..., description="Directory the descriptor was written under")
    created_folders: list[str] = Field(default_factory=list)
    written_files: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(
        default_factory=list, description="Paths rejected because they leave the root"
    )
    failures: dict[str, str] = Field(
        default_factory=dict, description="Relative path -> error message"
    )

    @property
    def nothing_written(self) -> bool:
        return not self.written_files

    @property
    def success(self) -> bool:
        return bool(self.written_files) and not self.failures
