"""BugBlaze scaffolder -- turns generated project text into files on disk.

Quick usage::

    from bugblaze.scaffolder import parse_descriptor, materialize

    descriptor = parse_descriptor(completion_text, description="todo app")
    report = materialize(descriptor, Path.cwd())
    print(report.written_files)
"""

from bugblaze.scaffolder.descriptor import detect_dialect, parse_descriptor
from bugblaze.scaffolder.materializer import Materializer, materialize, resolve_inside
from bugblaze.scaffolder.models import Dialect, MaterializeReport, ProjectDescriptor

__all__ = [
    "Dialect",
    "MaterializeReport",
    "Materializer",
    "ProjectDescriptor",
    "detect_dialect",
    "materialize",
    "parse_descriptor",
    "resolve_inside",
]
