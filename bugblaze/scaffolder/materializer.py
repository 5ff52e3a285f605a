"""Writes a ``ProjectDescriptor`` to disk.

Folders are created first, in descriptor order, then every file is written
(creating missing parent directories on demand). Each entry is independent:
a failing write is recorded and reported, and the remaining entries are
still processed. No path is ever written outside the destination root.
"""

from __future__ import annotations

from pathlib import Path, PureWindowsPath

from rich.markup import escape

from bugblaze.errors import WriteFailure
from bugblaze.utils import console, print_error, print_success, print_warning

from .models import MaterializeReport, ProjectDescriptor


def resolve_inside(root: Path, relative: str) -> Path | None:
    """Resolve *relative* under *root*, or return ``None`` if it would escape.

    Absolute paths, drive-qualified paths, ``..`` escapes and symlinks that
    point outside the root are all rejected. The root itself is not a valid
    target.
    """
    if not relative or Path(relative).is_absolute() or PureWindowsPath(relative).drive:
        return None
    resolved_root = root.resolve()
    target = (resolved_root / relative).resolve()
    if target == resolved_root or not target.is_relative_to(resolved_root):
        return None
    return target


class Materializer:
    """Realises project descriptors under a destination directory.

    Attributes:
        verbose: Print one line per created folder / written file.
    """

    def __init__(self, verbose: bool = True) -> None:
        self.verbose = verbose

    # -- Public API --------------------------------------------------------

    def materialize(self, descriptor: ProjectDescriptor, destination: str | Path) -> MaterializeReport:
        """Create the descriptor's folders and files under *destination*.

        Args:
            descriptor: Parsed project.
            destination: Parent directory. The project is written to
                ``destination / descriptor.root_name`` (or to *destination*
                itself when ``root_name`` is empty).

        Returns:
            A ``MaterializeReport`` listing what was created, skipped and
            what failed.

        Raises:
            WriteFailure: If the project root itself cannot be created.
        """
        root = Path(destination)
        if descriptor.root_name:
            root = root / descriptor.root_name
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteFailure(str(root), str(exc)) from exc
        root = root.resolve()

        report = MaterializeReport(root=root)

        for folder in descriptor.folders:
            target = resolve_inside(root, folder)
            if target is None:
                self._skip(report, folder)
                continue
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                self._fail(report, WriteFailure(folder, str(exc)))
                continue
            report.created_folders.append(folder)
            if self.verbose:
                console.print(f"  [green]+[/green] Created folder [bold]{escape(folder)}[/bold]")

        for path, content in descriptor.files.items():
            target = resolve_inside(root, path)
            if target is None:
                self._skip(report, path)
                continue
            try:
                self._write_file(target, content)
            except OSError as exc:
                self._fail(report, WriteFailure(path, str(exc)))
                continue
            report.written_files.append(path)
            if self.verbose:
                console.print(f"  [green]+[/green] Wrote [bold]{escape(path)}[/bold]")

        self._print_summary(report)
        return report

    # -- Internals ---------------------------------------------------------

    @staticmethod
    def _write_file(target: Path, content: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def _skip(self, report: MaterializeReport, path: str) -> None:
        report.skipped.append(path)
        print_warning(f"  Skipped {escape(path)}: path leaves the project directory")

    def _fail(self, report: MaterializeReport, failure: WriteFailure) -> None:
        report.failures[failure.path] = str(failure)
        print_error(f"  {escape(str(failure))}")

    def _print_summary(self, report: MaterializeReport) -> None:
        console.print()
        if report.nothing_written:
            print_warning("No files were written.")
            return
        print_success(f"Generated {len(report.written_files)} file(s) in {escape(str(report.root))}")
        if report.failures:
            print_error(f"{len(report.failures)} file(s) could not be written.")


def materialize(descriptor: ProjectDescriptor, destination: str | Path) -> MaterializeReport:
    """Convenience wrapper around ``Materializer().materialize``."""
    return Materializer().materialize(descriptor, destination)
