"""Parser for project descriptions returned by the LLM.

Turns the raw completion text of ``generate codebase`` into a
``ProjectDescriptor``. Two dialects are accepted and detected from their
section markers; both share the same path cleaning and folder/file rules.
Uses pure regex and line scanning -- nothing here touches the filesystem.
"""

from __future__ import annotations

import re

from bugblaze.errors import MissingSectionsError
from bugblaze.utils import sanitize_name

from .models import Dialect, ProjectDescriptor


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FOLDERS_MARKER = "---FOLDERS---"
FILES_MARKER = "---FILES---"
CONTENT_MARKER = "---CONTENT---"
MARKER_SECTIONS = (FOLDERS_MARKER, FILES_MARKER, CONTENT_MARKER)

STRUCTURE_MARKER = "PROJECT_STRUCTURE:"
CONTENTS_MARKER = "FILE_CONTENTS:"
HEADING_SECTIONS = (STRUCTURE_MARKER, CONTENTS_MARKER)

DEFAULT_ROOT_NAME = "generated-project"

# ``==path==`` on a line of its own. The first character after ``==`` may not
# be ``=`` and the path may not contain spaces, so rules like ``=======`` and
# notes like ``==> note ==`` are left inside file content.
_BLOCK_MARKER_PATTERN = re.compile(r"^==[ \t]*([^=\s]\S*?)[ \t]*==[ \t]*$", re.MULTILINE)
# ``// path`` on a line of its own (single token, no spaces).
_COMMENT_HEADER_PATTERN = re.compile(r"^[ \t]*//[ \t]*(\S+)[ \t]*$", re.MULTILINE)
# A file path whose last segment has a name and a letter-led extension (or is a
# dotfile). Rejects elisions like ``...``, ``e.g.`` and versions like ``v2.0``.
_HEADER_PATH_PATTERN = re.compile(
    r"(?:[\w.@+-]+/)*(?:[\w@+-](?:[\w.@+-]*\w)?\.[A-Za-z][\w-]*|\.[A-Za-z][\w.-]*)"
)
# Tree-drawing characters, bullets and indentation in front of a tree entry.
_TREE_PREFIX_PATTERN = re.compile(r"^([\s│├└─|`+*-]*)(.*)$")
_NUMBERING_PATTERN = re.compile(r"^\d+[.)]\s+")
_FENCE_OPEN_PATTERN = re.compile(r"^```[\w+#.-]*[ \t]*$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def clean_path(raw: str) -> str:
    """Normalise one path as written by the model.

    Strips bullets, list numbering, tree characters, backticks, quotes, bold
    markers, ``./`` prefixes and trailing comments; converts backslashes to
    forward slashes. Returns ``""`` for whitespace-only input.

    Examples::

        clean_path("- `src/app.py`") -> "src/app.py"
        clean_path("├── ./lib/") -> "lib/"
    """
    text = raw.strip()
    if not text:
        return ""
    text = _TREE_PREFIX_PATTERN.match(text).group(2)
    text = _NUMBERING_PATTERN.sub("", text)
    # Drop trailing "# comment" or "(description)" annotations.
    text = re.split(r"\s+(?:#|\(|--\s)", text, maxsplit=1)[0]
    text = text.strip().strip("`'\"*").strip()
    text = text.replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    text = re.sub(r"/{2,}", "/", text)
    return text


def is_folder_path(path: str) -> bool:
    """Return ``True`` if *path* names a folder.

    The decision is purely syntactic: a final segment containing a dot is a
    file, anything else is a folder.
    """
    stripped = path.rstrip("/")
    if not stripped:
        return False
    return "." not in stripped.rsplit("/", 1)[-1]


def normalize_content(content: str) -> str:
    """Trim trailing whitespace, drop a wrapping code fence, end with one newline."""
    lines = content.strip("\n").splitlines()
    if len(lines) >= 2 and _FENCE_OPEN_PATTERN.match(lines[0].strip()) and lines[-1].strip() == "```":
        lines = lines[1:-1]
    return "\n".join(lines).rstrip() + "\n"


def _split_sections(text: str, markers: tuple[str, ...]) -> dict[str, str]:
    """Return the body that follows each marker present in *text*.

    A body runs from the end of its marker to the start of whichever other
    marker comes next, or to the end of the text.
    """
    positions = sorted(
        (text.find(marker), marker) for marker in markers if marker in text
    )
    bodies: dict[str, str] = {}
    for index, (start, marker) in enumerate(positions):
        end = positions[index + 1][0] if index + 1 < len(positions) else len(text)
        bodies[marker] = text[start + len(marker):end]
    return bodies


def _add_folder(folders: list[str], path: str) -> None:
    folder = path.rstrip("/")
    if folder and is_folder_path(folder) and folder not in folders:
        folders.append(folder)


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------

def parse_folder_list(section: str) -> list[str]:
    """Collect folders from a one-path-per-line section.

    Whitespace-only lines and entries that look like files are ignored.
    """
    folders: list[str] = []
    for line in section.splitlines():
        path = clean_path(line)
        if path:
            _add_folder(folders, path)
    return folders


def parse_content_blocks(section: str) -> dict[str, str]:
    """Parse ``==path==`` blocks into a ``{path: content}`` mapping.

    Each block's content ends where the next ``==...==`` marker line begins
    (that line is never part of the content) or at the end of the section.
    For a duplicated path the last block wins.
    """
    files: dict[str, str] = {}
    markers = list(_BLOCK_MARKER_PATTERN.finditer(section))
    for index, match in enumerate(markers):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(section)
        path = clean_path(match.group(1))
        if not path or path.endswith("/"):
            continue
        files[path] = normalize_content(section[match.end():end])
    return files


def parse_structure_tree(section: str) -> tuple[list[str], set[str], list[str]]:
    """Walk an indented project tree.

    Lines ending in ``/`` are folders; nesting follows indentation depth.
    Returns the folder paths in encounter order, the set of leaf entries
    (full path and bare name) so content headers can be recognised, and the
    top-level entries in encounter order.
    """
    folders: list[str] = []
    leaves: set[str] = set()
    top_level: list[str] = []
    stack: list[tuple[int, str]] = []

    for line in section.splitlines():
        if not line.strip() or line.strip().startswith("```"):
            continue
        prefix = _TREE_PREFIX_PATTERN.match(line.rstrip()).group(1)
        name = clean_path(line)
        if not name:
            continue
        depth = len(prefix)
        while stack and stack[-1][0] >= depth:
            stack.pop()
        parents = [entry for _, entry in stack]
        full_path = "/".join(parents + [name.rstrip("/")])
        if not parents and full_path not in top_level:
            top_level.append(full_path)

        if name.endswith("/"):
            _add_folder(folders, full_path)
            stack.append((depth, name.rstrip("/")))
        else:
            leaves.add(full_path)
            leaves.add(name)
    return folders, leaves, top_level


def _hoist_project_folder(
    folders: list[str], top_level: list[str], files: dict[str, str]
) -> tuple[str, list[str], dict[str, str]]:
    """Make a tree's single top-level folder the project root.

    Folder paths and any file headers that repeat the folder name are made
    relative to it, so folders and files land in the same tree. Returns
    ``("", folders, files)`` unchanged when the tree has no single top folder.
    """
    if len(top_level) != 1 or top_level[0] not in folders:
        return "", folders, files
    root_name = sanitize_name(top_level[0])
    if not root_name:
        return "", folders, files
    prefix = top_level[0] + "/"
    inner_folders = [folder[len(prefix):] for folder in folders if folder.startswith(prefix)]
    inner_files = {
        (path[len(prefix):] if path.startswith(prefix) else path): content
        for path, content in files.items()
    }
    return root_name, inner_folders, inner_files


def parse_comment_blocks(section: str, known_files: set[str] | None = None) -> dict[str, str]:
    """Parse ``// path`` headed blocks into a ``{path: content}`` mapping.

    A ``//`` line only counts as a header when its single token names a file
    with an extension (``src/app.js``, ``.env``) or a file from the structure
    tree. Ordinary ``// comment`` lines and elisions such as ``// ...`` stay
    inside the content.
    """
    known = known_files or set()
    headers = []
    for match in _COMMENT_HEADER_PATTERN.finditer(section):
        if "://" in match.group(1):
            continue
        path = clean_path(match.group(1))
        if not path or path.endswith("/"):
            continue
        if path in known or _HEADER_PATH_PATTERN.fullmatch(path):
            headers.append((match, path))

    files: dict[str, str] = {}
    for index, (match, path) in enumerate(headers):
        end = headers[index + 1][0].start() if index + 1 < len(headers) else len(section)
        files[path] = normalize_content(section[match.end():end])
    return files


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def detect_dialect(text: str) -> Dialect:
    """Pick the dialect from the section markers present in *text*.

    Raises:
        MissingSectionsError: If neither dialect's markers are present.
    """
    if FOLDERS_MARKER in text:
        return Dialect.MARKERS
    if STRUCTURE_MARKER in text or CONTENTS_MARKER in text:
        return Dialect.HEADINGS
    if FILES_MARKER in text or CONTENT_MARKER in text:
        return Dialect.MARKERS
    raise MissingSectionsError(list(MARKER_SECTIONS))


def parse_descriptor(text: str, description: str = "") -> ProjectDescriptor:
    """Parse one completion into a ``ProjectDescriptor``.

    Args:
        text: Raw completion text.
        description: The user's project description; its sanitized form
            names the project folder for the markers dialect. The headings
            dialect is rooted at the tree's single top-level folder, if any.

    Returns:
        The descriptor. ``files`` is empty when the sections are present but
        contain no content blocks.

    Raises:
        MissingSectionsError: If the required section markers are absent.
    """
    dialect = detect_dialect(text)

    if dialect is Dialect.MARKERS:
        missing = [marker for marker in MARKER_SECTIONS if marker not in text]
        if missing:
            raise MissingSectionsError(missing)
        sections = _split_sections(text, MARKER_SECTIONS)
        return ProjectDescriptor(
            root_name=sanitize_name(description) or DEFAULT_ROOT_NAME,
            dialect=dialect,
            folders=parse_folder_list(sections[FOLDERS_MARKER]),
            files=parse_content_blocks(sections[CONTENT_MARKER]),
        )

    missing = [marker for marker in HEADING_SECTIONS if marker not in text]
    if missing:
        raise MissingSectionsError(missing)
    sections = _split_sections(text, HEADING_SECTIONS)
    folders, leaves, top_level = parse_structure_tree(sections[STRUCTURE_MARKER])
    files = parse_comment_blocks(sections[CONTENTS_MARKER], known_files=leaves)
    root_name, folders, files = _hoist_project_folder(folders, top_level, files)
    return ProjectDescriptor(
        root_name=root_name,
        dialect=dialect,
        folders=folders,
        files=files,
    )
