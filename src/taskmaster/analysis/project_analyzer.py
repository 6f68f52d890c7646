# src/taskmaster/analysis/project_analyzer.py

"""
Heuristic project scanner.

Surfaces TODO/FIXME comments and a few code smells as task suggestions.
Everything here is regex over source text: findings are hints for a human to
review, not lint results. Nested braces, strings containing braces and
comments are not understood.
"""

from __future__ import annotations

import logging
import os
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..tasks.task_models import Suggestion, TaskPriority

logger = logging.getLogger(__name__)

EXCLUDE_DIRS: Final[frozenset[str]] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        ".expo",
        "__pycache__",
        ".venv",
        "venv",
        ".mypy_cache",
        ".pytest_cache",
        ".tox",
        "dist",
        "build",
        "Taskmaster",
        ".taskmaster",
    }
)
DEFAULT_EXTENSIONS: Final[tuple[str, ...]] = (".js", ".jsx", ".ts", ".tsx", ".py")

TODO_MARKERS: Final[tuple[str, ...]] = ("TODO:", "FIXME:", "TODO ", "FIXME ")

LARGE_FUNCTION_LINES = 50
MIN_DUPLICATE_BLOCK_CHARS = 100

RE_FUNCTION = re.compile(r"function\s+\w+\s*\([^)]*\)\s*\{[^}]*\}", re.DOTALL)
RE_FLAT_BLOCK = re.compile(r"\{[^{}]*\}")
RE_WHITESPACE = re.compile(r"\s+")
RE_HARDCODED_URL = re.compile(r"""(['"])(?:http|api|www)(?:(?!\1).)*\1""")


@dataclass(frozen=True, slots=True)
class TodoComment:
    file: str
    line: int
    text: str
    type: str  # "TODO" | "FIXME"


@dataclass(frozen=True, slots=True)
class Improvement:
    file: str
    type: str
    description: str
    details: str


class ProjectAnalyzer:
    def __init__(self, project_root: str | Path = ".") -> None:
        self.project_root = Path(project_root).resolve()
        self.exclude_dirs = EXCLUDE_DIRS

    # ---- filesystem ----

    def scan_files(
        self,
        root: str | Path | None = None,
        extensions: Iterable[str] | None = None,
    ) -> list[Path]:
        """
        Recursively collect files under `root` whose suffix is in `extensions`.

        Excluded directory names are skipped at any depth and directory
        symlinks are not followed. A directory that cannot be listed, or an
        entry that cannot be stat'ed, is logged and contributes nothing.
        """
        base = Path(root).resolve() if root is not None else self.project_root
        exts = tuple(extensions) if extensions is not None else DEFAULT_EXTENSIONS
        results: list[Path] = []

        try:
            with os.scandir(base) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.error("Error scanning directory %s: %s", base, e)
            return results

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name not in self.exclude_dirs:
                        results.extend(self.scan_files(entry.path, exts))
                elif entry.is_file() and os.path.splitext(entry.name)[1] in exts:
                    results.append(Path(entry.path))
            except OSError as e:
                logger.error("Error reading entry %s: %s", entry.path, e)

        return results

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.project_root).as_posix()
        except ValueError:
            return path.as_posix()

    @staticmethod
    def _read(path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="replace")

    # ---- heuristics ----

    def find_todo_comments(self) -> list[TodoComment]:
        todos: list[TodoComment] = []

        for file in self.scan_files():
            try:
                lines = self._read(file).split("\n")
            except OSError as e:
                logger.error("Error processing file %s: %s", file, e)
                continue

            rel = self._relative(file)
            for lineno, line in enumerate(lines, start=1):
                if any(marker in line for marker in TODO_MARKERS):
                    todos.append(
                        TodoComment(
                            file=rel,
                            line=lineno,
                            text=line.strip(),
                            type="FIXME" if "FIXME" in line else "TODO",
                        )
                    )

        logger.debug("Found %d TODO/FIXME comments under %s", len(todos), self.project_root)
        return todos

    def identify_improvement_areas(self) -> list[Improvement]:
        improvements: list[Improvement] = []

        for file in self.scan_files():
            try:
                content = self._read(file)
            except OSError as e:
                logger.error("Error analyzing file %s: %s", file, e)
                continue

            rel = self._relative(file)
            improvements.extend(_large_functions(rel, content))

            duplication = _duplication(rel, content)
            if duplication is not None:
                improvements.append(duplication)

            if RE_HARDCODED_URL.search(content):
                improvements.append(
                    Improvement(
                        file=rel,
                        type="Optimization",
                        description="Hardcoded URLs or API endpoints",
                        details=(
                            "Consider moving hardcoded URLs or API endpoints to a "
                            "configuration file or constants."
                        ),
                    )
                )

        logger.debug("Found %d improvement areas under %s", len(improvements), self.project_root)
        return improvements

    def generate_task_suggestions(self) -> list[Suggestion]:
        suggestions: list[Suggestion] = []

        for todo in self.find_todo_comments():
            is_fixme = todo.type == "FIXME"
            text = todo.text.replace(f"{todo.type}:", "", 1).strip()
            suggestions.append(
                Suggestion(
                    title=f"{todo.type}: {text}",
                    description=f"Found in {todo.file}:{todo.line}",
                    category="Refactoring" if is_fixme else "Documentation",
                    priority=(TaskPriority.HIGH if is_fixme else TaskPriority.MEDIUM).value,
                    notes=f"Original comment: {todo.text}",
                )
            )

        for improvement in self.identify_improvement_areas():
            suggestions.append(
                Suggestion(
                    title=improvement.description,
                    description=f"{improvement.details} ({improvement.file})",
                    category=improvement.type,
                    priority=TaskPriority.MEDIUM.value,
                    notes="Auto-detected by project analyzer",
                )
            )

        logger.info("Generated %d task suggestions", len(suggestions))
        return suggestions


def _large_functions(rel: str, content: str) -> list[Improvement]:
    out: list[Improvement] = []
    for m in RE_FUNCTION.finditer(content):
        if m.group(0).count("\n") + 1 > LARGE_FUNCTION_LINES:
            out.append(
                Improvement(
                    file=rel,
                    type="Refactoring",
                    description="Large function that might need refactoring",
                    details=(
                        f"Function has over {LARGE_FUNCTION_LINES} lines and might benefit "
                        "from being broken down into smaller functions."
                    ),
                )
            )
    return out


def _duplication(rel: str, content: str) -> Improvement | None:
    """One finding per file at most, for the first block seen more than once."""
    counts = Counter(
        RE_WHITESPACE.sub(" ", block).strip()
        for block in RE_FLAT_BLOCK.findall(content)
        if len(block) > MIN_DUPLICATE_BLOCK_CHARS
    )
    for count in counts.values():
        if count > 1:
            return Improvement(
                file=rel,
                type="Duplication",
                description="Possible code duplication detected",
                details=(
                    f"Found {count} instances of similar code blocks, consider "
                    "extracting to a reusable function."
                ),
            )
    return None
