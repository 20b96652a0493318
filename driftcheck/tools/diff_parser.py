"""Git diff parsing utilities."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import re


DOC_EXTENSIONS = (".md", ".txt", ".rst", ".toml", ".yaml", ".yml", ".json")


@dataclass(frozen=True)
class Hunk:
    """Represents a single hunk from a git diff."""
    file: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    content: str


@dataclass(frozen=True)
class ParsedDiff:
    """Changed files and hunks of one unified diff, in order of appearance."""
    files: Tuple[str, ...] = ()
    hunks: Tuple[Hunk, ...] = ()
    raw: str = field(default="", repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.files


_FILE_HEADER = re.compile(r'^diff --git (?:"?a/.*?"?) "?b/(.*?)"?$')
_RANGE = re.compile(r'^[-+](\d+)(?:,(\S*))?$')


def _parse_range(token: str) -> Optional[Tuple[int, int]]:
    """Parse '-12,3' / '+7' into (start, count); count defaults to 1."""
    match = _RANGE.match(token)
    if not match:
        return None
    start = int(match.group(1))
    count_str = match.group(2)
    try:
        count = int(count_str) if count_str else 1
    except ValueError:
        count = 1
    return start, count


def parse_hunk_header(line: str) -> Optional[Tuple[int, int, int, int]]:
    """
    Parse a hunk header of the form '@@ -a,b +c,d @@ context'.

    Returns:
        (old_start, old_count, new_start, new_count), or None when the header
        carries no usable ranges
    """
    parts = line.split()
    old = new = None
    for part in parts[1:]:
        if part.startswith("@@"):
            break
        if part.startswith("-") and old is None:
            old = _parse_range(part)
        elif part.startswith("+") and new is None:
            new = _parse_range(part)
    if old is None or new is None:
        return None
    return old[0], old[1], new[0], new[1]


def parse_diff(diff_text: str) -> ParsedDiff:
    """
    Parse a unified diff string into a ParsedDiff.

    Malformed hunk headers are skipped rather than failing the parse.

    Args:
        diff_text: Raw unified diff output from git

    Returns:
        ParsedDiff with the new-side path of every file, in first-seen order
    """
    if not diff_text or not diff_text.strip():
        return ParsedDiff(raw=diff_text or "")

    files: List[str] = []
    hunks: List[Hunk] = []
    current_file: Optional[str] = None
    current_header: Optional[Tuple[int, int, int, int]] = None
    current_lines: List[str] = []

    def save_current_hunk():
        nonlocal current_header, current_lines
        if current_file is not None and current_header is not None:
            old_start, old_count, new_start, new_count = current_header
            hunks.append(Hunk(
                file=current_file,
                old_start=old_start,
                old_count=old_count,
                new_start=new_start,
                new_count=new_count,
                content='\n'.join(current_lines),
            ))
        current_header = None
        current_lines = []

    for line in diff_text.splitlines():
        if line.startswith("diff --git "):
            save_current_hunk()
            file_match = _FILE_HEADER.match(line)
            if file_match:
                current_file = file_match.group(1)
            elif " b/" in line:
                current_file = line.split(" b/", 1)[1]
            else:
                current_file = None
            if current_file is not None and current_file not in files:
                files.append(current_file)
            continue

        if line.startswith("@@"):
            save_current_hunk()
            current_header = parse_hunk_header(line)
            continue

        if current_header is not None:
            current_lines.append(line)

    save_current_hunk()

    return ParsedDiff(files=tuple(files), hunks=tuple(hunks), raw=diff_text)


def is_docs_only_diff(parsed: ParsedDiff) -> bool:
    """Check if every changed file is documentation or configuration."""
    if parsed.is_empty:
        return False
    return all(f.endswith(DOC_EXTENSIONS) for f in parsed.files)
