"""Single-level glob matching against a package directory."""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path

# Longest single glob handed to the matcher; longer alternations must be split.
MAX_PATTERN_LENGTH = 260


@dataclass(frozen=True)
class MatchResult:
    """Outcome of evaluating one pattern in one directory."""

    pattern: str
    matches: tuple[Path, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the pattern could be evaluated."""
        return self.error is None


def _unbalanced_bracket(pattern: str) -> bool:
    """Check for a ``[`` that opens a character class which never closes.

    Mirrors fnmatch's reading of classes: a leading ``!`` negates and a
    ``]`` right after the opening (or after the ``!``) is a literal.
    """
    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        close = pattern.find("]", j)
        if close == -1:
            return True
        i = close + 1
    return False


def validate_pattern(pattern: str) -> str | None:
    """Check that a pattern is a usable single-level glob.

    Args:
        pattern: Glob pattern to check.

    Returns:
        A description of the problem, or None if the pattern is valid.

    """
    if not pattern:
        return "empty pattern"
    if len(pattern) > MAX_PATTERN_LENGTH:
        return f"pattern longer than {MAX_PATTERN_LENGTH} characters"
    if "/" in pattern or (os.sep != "/" and os.sep in pattern):
        return "pattern contains a path separator"
    if "**" in pattern:
        return "recursive patterns are not supported"
    if _unbalanced_bracket(pattern):
        return "unbalanced '[' in pattern"
    return None


def _name_matches(name: str, pattern: str) -> bool:
    # Dotfiles only match patterns that start with a dot, as with glob().
    if name.startswith(".") and not pattern.startswith("."):
        return False
    return fnmatch.fnmatchcase(name, pattern)


def match(directory: Path, pattern: str) -> MatchResult:
    """Find the immediate children of a directory matching a glob.

    Args:
        directory: Package directory to search.
        pattern: Shell-style glob (``*``, ``?``, ``[...]``, literals).

    Returns:
        MatchResult with the sorted absolute matches, or with ``error`` set
        when the pattern is malformed or the directory cannot be listed.

    """
    problem = validate_pattern(pattern)
    if problem:
        return MatchResult(pattern=pattern, error=problem)

    directory = Path(directory).absolute()
    try:
        children = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        return MatchResult(pattern=pattern, error=f"cannot list {directory}: {e}")

    matches = tuple(child for child in children if _name_matches(child.name, pattern))
    return MatchResult(pattern=pattern, matches=matches)
