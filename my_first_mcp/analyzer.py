"""
Project analysis core.

Pure functions behind the analysis tools:
- count_lines: code / comment / blank line statistics per extension
- analyze_structure: indented directory tree with file and directory counts
- analyze_dependencies: dependency and script listing from package.json

Every public entry point returns a result record and never raises for the
conditions it anticipates (missing path, missing or malformed manifest).
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set


logger = logging.getLogger(__name__)


MANIFEST_FILENAME = "package.json"
DEPENDENCY_CACHE_DIR = "node_modules"
ALWAYS_HIDDEN_DIRS = frozenset({".git"})

TEXT_EXTENSIONS = frozenset({
    "ts", "js", "tsx", "jsx", "json", "md", "txt", "css", "scss",
    "html", "py", "go", "rs", "java", "c", "cpp", "h",
})


class AnalysisErrorKind(Enum):
    """Why an analysis failed."""
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    MANIFEST_MISSING = "manifest_missing"
    MANIFEST_INVALID = "manifest_invalid"
    TRUNCATED = "truncated"
    INTERNAL = "internal"


class TraversalBudgetExceeded(Exception):
    """Raised when a walk visits more entries than its budget allows."""

    def __init__(self, budget: int):
        super().__init__(f"Traversal stopped after {budget} entries")
        self.budget = budget


# ============================================
# Comment-pattern table
# ============================================

@dataclass(frozen=True)
class ExtensionProfile:
    """Comment delimiters for one file extension."""
    extension: str
    line_comment: Optional[str] = None
    block_comment_start: Optional[str] = None
    block_comment_end: Optional[str] = None


def _c_style(ext: str) -> ExtensionProfile:
    return ExtensionProfile(ext, "//", "/*", "*/")


COMMENT_PROFILES: Dict[str, ExtensionProfile] = {
    profile.extension: profile
    for profile in [
        *(_c_style(ext) for ext in ("ts", "tsx", "js", "jsx", "java", "c", "cpp", "go", "scss")),
        ExtensionProfile("rs", "//"),
        ExtensionProfile("css", None, "/*", "*/"),
        ExtensionProfile("py", "#"),
        ExtensionProfile("html", None, "<!--", "-->"),
    ]
}


def get_profile(extension: str) -> Optional[ExtensionProfile]:
    """Look up comment syntax for an extension. None means no comment syntax."""
    return COMMENT_PROFILES.get(extension.lower())


# ============================================
# Result records
# ============================================

@dataclass
class LineClassification:
    """Line counts for a single file."""
    total: int = 0
    code: int = 0
    comment: int = 0
    blank: int = 0


@dataclass
class ExtensionStats:
    """Accumulated line counts for one extension."""
    files: int = 0
    lines: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    blank_lines: int = 0

    def add(self, counts: LineClassification) -> None:
        self.files += 1
        self.lines += counts.total
        self.code_lines += counts.code
        self.comment_lines += counts.comment
        self.blank_lines += counts.blank

    def to_dict(self) -> dict:
        return {
            "files": self.files,
            "lines": self.lines,
            "codeLines": self.code_lines,
            "commentLines": self.comment_lines,
            "blankLines": self.blank_lines,
        }


@dataclass
class LineCountResult:
    """Result of count_lines. Numeric fields are None on failure."""
    success: bool
    total_lines: Optional[int] = None
    total_files: Optional[int] = None
    code_lines: Optional[int] = None
    comment_lines: Optional[int] = None
    blank_lines: Optional[int] = None
    by_extension: Optional[Dict[str, ExtensionStats]] = None
    error: Optional[str] = None
    error_kind: Optional[AnalysisErrorKind] = None

    @classmethod
    def failure(cls, kind: AnalysisErrorKind, message: str) -> "LineCountResult":
        return cls(success=False, error=message, error_kind=kind)

    def to_dict(self) -> dict:
        if not self.success:
            return _failure_dict(self.error, self.error_kind)
        return {
            "success": True,
            "totalLines": self.total_lines,
            "totalFiles": self.total_files,
            "codeLines": self.code_lines,
            "commentLines": self.comment_lines,
            "blankLines": self.blank_lines,
            "byExtension": {
                ext: stats.to_dict() for ext, stats in (self.by_extension or {}).items()
            },
        }


@dataclass
class DirectoryStats:
    """Counts of entries rendered by analyze_structure."""
    total_files: int = 0
    total_dirs: int = 0

    def to_dict(self) -> dict:
        return {"totalFiles": self.total_files, "totalDirs": self.total_dirs}


@dataclass
class StructureResult:
    """Result of analyze_structure."""
    success: bool
    path: str
    tree: Optional[str] = None
    stats: Optional[DirectoryStats] = None
    error: Optional[str] = None
    error_kind: Optional[AnalysisErrorKind] = None

    def to_dict(self) -> dict:
        if not self.success:
            result = _failure_dict(self.error, self.error_kind)
            result["path"] = self.path
            return result
        return {
            "success": True,
            "path": self.path,
            "tree": self.tree,
            "stats": self.stats.to_dict() if self.stats else None,
        }


@dataclass
class DependencyInfo:
    name: str
    version: str

    def to_dict(self) -> dict:
        return {"name": self.name, "version": self.version}


@dataclass
class ScriptInfo:
    name: str
    command: str

    def to_dict(self) -> dict:
        return {"name": self.name, "command": self.command}


@dataclass
class DependencyResult:
    """Result of analyze_dependencies. dev_dependencies is None when not reported."""
    success: bool
    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    dependencies: List[DependencyInfo] = field(default_factory=list)
    dev_dependencies: Optional[List[DependencyInfo]] = None
    scripts: List[ScriptInfo] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[AnalysisErrorKind] = None

    @classmethod
    def failure(cls, kind: AnalysisErrorKind, message: str) -> "DependencyResult":
        return cls(success=False, error=message, error_kind=kind)

    def to_dict(self) -> dict:
        if not self.success:
            return _failure_dict(self.error, self.error_kind)
        result = {"success": True}
        for key in ("name", "version", "description"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result["dependencies"] = [d.to_dict() for d in self.dependencies]
        if self.dev_dependencies is not None:
            result["devDependencies"] = [d.to_dict() for d in self.dev_dependencies]
        result["scripts"] = [s.to_dict() for s in self.scripts]
        return result


def _failure_dict(error: Optional[str], kind: Optional[AnalysisErrorKind]) -> dict:
    result = {"success": False, "error": error}
    if kind is not None:
        result["errorKind"] = kind.value
    return result


# ============================================
# Line classifier
# ============================================

def split_lines(content: str) -> List[str]:
    """Split on line feeds. A trailing terminator does not start a new line."""
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines


def classify_lines(content: str, extension: str) -> LineClassification:
    """
    Classify every line of a file as blank, comment or code.

    Comment detection is purely prefix based: a line counts as a comment when
    its trimmed text starts with the extension's line-comment token or
    block-comment start, or while a block comment is open. String literals
    are not recognized.
    """
    profile = get_profile(extension) or ExtensionProfile(extension)
    block_start = profile.block_comment_start
    block_end = profile.block_comment_end
    line_comment = profile.line_comment

    lines = split_lines(content)
    counts = LineClassification(total=len(lines))
    in_block = False

    for line in lines:
        trimmed = line.strip()

        if not trimmed:
            counts.blank += 1
            continue

        if in_block:
            counts.comment += 1
            if block_end and block_end in trimmed:
                in_block = False
            continue

        if block_start and trimmed.startswith(block_start):
            counts.comment += 1
            if not block_end or block_end not in trimmed:
                in_block = True
            continue

        if line_comment and trimmed.startswith(line_comment):
            counts.comment += 1
            continue

        counts.code += 1

    return counts


# ============================================
# Directory traversal helpers
# ============================================

class _Walk:
    """Per-call traversal state: entry budget and visited real paths."""

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries
        self.entries = 0
        self._visited: Set[str] = set()

    def tick(self) -> None:
        self.entries += 1
        if self.max_entries is not None and self.entries > self.max_entries:
            raise TraversalBudgetExceeded(self.max_entries)

    def enter(self, dir_path: str) -> bool:
        """Mark a directory visited. False if its real path was already walked."""
        real = os.path.realpath(dir_path)
        if real in self._visited:
            logger.debug("Skipping already visited directory %s", dir_path)
            return False
        self._visited.add(real)
        return True


def _file_extension(name: str) -> str:
    return os.path.splitext(name)[1][1:].lower()


def _normalize_extensions(extensions: Optional[Iterable[str]]) -> Optional[Set[str]]:
    if not extensions:
        return None
    normalized = {ext.strip().lstrip(".").lower() for ext in extensions}
    normalized.discard("")
    return normalized or None


def _check_root(root_path: str) -> Optional[tuple]:
    """Return (kind, message) if root_path cannot be walked."""
    if not os.path.exists(root_path):
        return AnalysisErrorKind.NOT_FOUND, f"Path not found: {root_path}"
    if not os.path.isdir(root_path):
        return AnalysisErrorKind.NOT_A_DIRECTORY, f"Not a directory: {root_path}"
    return None


# ============================================
# Line counting
# ============================================

def count_lines(
    root_path: str,
    extensions: Optional[Iterable[str]] = None,
    max_entries: Optional[int] = None,
) -> LineCountResult:
    """
    Count code, comment and blank lines under root_path.

    Args:
        root_path: Directory to analyze
        extensions: Only count files with these extensions (e.g. ["ts", "py"])
        max_entries: Fail with TRUNCATED after visiting this many entries

    Returns:
        LineCountResult with totals and a per-extension breakdown
    """
    try:
        problem = _check_root(root_path)
        if problem:
            return LineCountResult.failure(*problem)

        totals = ExtensionStats()
        by_extension: Dict[str, ExtensionStats] = {}
        _count_recursive(
            root_path,
            _normalize_extensions(extensions),
            totals,
            by_extension,
            _Walk(max_entries),
        )

        return LineCountResult(
            success=True,
            total_lines=totals.lines,
            total_files=totals.files,
            code_lines=totals.code_lines,
            comment_lines=totals.comment_lines,
            blank_lines=totals.blank_lines,
            by_extension=by_extension,
        )
    except TraversalBudgetExceeded as e:
        return LineCountResult.failure(AnalysisErrorKind.TRUNCATED, str(e))
    except Exception as e:
        logger.warning("Line count failed for %s: %s", root_path, e)
        return LineCountResult.failure(AnalysisErrorKind.INTERNAL, str(e))


def _count_recursive(
    dir_path: str,
    extensions: Optional[Set[str]],
    totals: ExtensionStats,
    by_extension: Dict[str, ExtensionStats],
    walk: _Walk,
) -> None:
    if not walk.enter(dir_path):
        return

    with os.scandir(dir_path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        walk.tick()

        if entry.is_dir():
            if not entry.name.startswith(".") and entry.name != DEPENDENCY_CACHE_DIR:
                _count_recursive(entry.path, extensions, totals, by_extension, walk)
            continue

        if not entry.is_file() or entry.name.startswith("."):
            continue

        ext = _file_extension(entry.name)
        if extensions is not None and ext not in extensions:
            continue
        if ext not in TEXT_EXTENSIONS:
            continue

        try:
            with open(entry.path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable file %s: %s", entry.path, e)
            continue

        counts = classify_lines(content, ext)
        totals.add(counts)
        by_extension.setdefault(ext, ExtensionStats()).add(counts)


# ============================================
# Structure tree
# ============================================

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "


def analyze_structure(
    root_path: str,
    max_depth: Optional[int] = None,
    show_hidden: bool = False,
    max_entries: Optional[int] = None,
) -> StructureResult:
    """
    Render the directory tree under root_path.

    Args:
        root_path: Directory to analyze
        max_depth: Number of levels to list (1 = direct children only)
        show_hidden: Include dot-prefixed entries (.git is always left out)
        max_entries: Fail with TRUNCATED after visiting this many entries

    Returns:
        StructureResult with the rendered tree and entry counts
    """
    try:
        problem = _check_root(root_path)
        if problem:
            kind, message = problem
            return StructureResult(success=False, path=root_path, error=message, error_kind=kind)

        stats = DirectoryStats()
        lines: List[str] = []
        _build_tree(root_path, "", 0, max_depth, show_hidden, stats, lines, _Walk(max_entries))

        return StructureResult(
            success=True,
            path=root_path,
            tree="".join(lines),
            stats=stats,
        )
    except TraversalBudgetExceeded as e:
        return StructureResult(
            success=False,
            path=root_path,
            error=str(e),
            error_kind=AnalysisErrorKind.TRUNCATED,
        )
    except Exception as e:
        logger.warning("Structure analysis failed for %s: %s", root_path, e)
        return StructureResult(
            success=False,
            path=root_path,
            error=str(e),
            error_kind=AnalysisErrorKind.INTERNAL,
        )


def _visible(name: str, show_hidden: bool) -> bool:
    if name in ALWAYS_HIDDEN_DIRS:
        return False
    return show_hidden or not name.startswith(".")


def _build_tree(
    dir_path: str,
    prefix: str,
    depth: int,
    max_depth: Optional[int],
    show_hidden: bool,
    stats: DirectoryStats,
    lines: List[str],
    walk: _Walk,
) -> None:
    if max_depth is not None and depth >= max_depth:
        return
    if not walk.enter(dir_path):
        return

    with os.scandir(dir_path) as it:
        entries = [e for e in it if _visible(e.name, show_hidden)]

    # directories first, then case-insensitive by name
    entries.sort(key=lambda e: (not e.is_dir(), e.name.casefold(), e.name))

    for i, entry in enumerate(entries):
        walk.tick()
        is_last = i == len(entries) - 1
        connector = LAST_BRANCH if is_last else BRANCH

        if entry.is_dir():
            stats.total_dirs += 1
            lines.append(f"{prefix}{connector}{entry.name}/\n")
            child_prefix = prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX)
            _build_tree(
                entry.path, child_prefix, depth + 1, max_depth, show_hidden, stats, lines, walk
            )
        else:
            stats.total_files += 1
            lines.append(f"{prefix}{connector}{entry.name}\n")


# ============================================
# Dependencies
# ============================================

def analyze_dependencies(root_path: str, include_dev_deps: bool = True) -> DependencyResult:
    """
    Read package.json under root_path and list its dependencies and scripts.

    Args:
        root_path: Directory containing package.json
        include_dev_deps: Report devDependencies as well

    Returns:
        DependencyResult; error_kind tells a missing manifest from a malformed one
    """
    manifest_path = os.path.join(root_path, MANIFEST_FILENAME)

    try:
        if not os.path.isfile(manifest_path):
            return DependencyResult.failure(
                AnalysisErrorKind.MANIFEST_MISSING,
                f"{MANIFEST_FILENAME} not found: {manifest_path}",
            )

        with open(manifest_path, "r", encoding="utf-8") as f:
            try:
                manifest = json.load(f)
            except ValueError as e:
                return DependencyResult.failure(
                    AnalysisErrorKind.MANIFEST_INVALID,
                    f"Invalid {MANIFEST_FILENAME}: {e}",
                )

        if not isinstance(manifest, dict):
            return DependencyResult.failure(
                AnalysisErrorKind.MANIFEST_INVALID,
                f"Invalid {MANIFEST_FILENAME}: top level must be an object",
            )

        result = DependencyResult(
            success=True,
            name=manifest.get("name"),
            version=manifest.get("version"),
            description=manifest.get("description"),
            dependencies=_dependency_list(manifest.get("dependencies")),
            scripts=[
                ScriptInfo(name=name, command=str(command))
                for name, command in _entries(manifest.get("scripts"))
            ],
        )

        dev_dependencies = manifest.get("devDependencies")
        if include_dev_deps and isinstance(dev_dependencies, dict):
            result.dev_dependencies = _dependency_list(dev_dependencies)

        return result
    except Exception as e:
        logger.warning("Dependency analysis failed for %s: %s", root_path, e)
        return DependencyResult.failure(AnalysisErrorKind.INTERNAL, str(e))


def _entries(mapping) -> list:
    if not isinstance(mapping, dict):
        return []
    return list(mapping.items())


def _dependency_list(mapping) -> List[DependencyInfo]:
    return [DependencyInfo(name=name, version=str(version)) for name, version in _entries(mapping)]
