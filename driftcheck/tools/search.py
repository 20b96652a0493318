"""Documentation search backed by ripgrep."""

import asyncio
import glob
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..config import DocsConfig
from ..errors import RipgrepNotFoundError, SearchError
from ..models import DocChunk
from ..utils.logging import get_logger

logger = get_logger(__name__)

MERGE_DISTANCE = 5
CHUNK_SEPARATOR = "\n...\n"


def check_ripgrep():
    """Raise RipgrepNotFoundError unless `rg` is on PATH."""
    if shutil.which("rg") is None:
        raise RipgrepNotFoundError()


def expand_doc_paths(
    paths: Iterable[str],
    ignore: Iterable[str],
    root: Union[str, Path] = ".",
) -> List[str]:
    """
    Expand documentation glob patterns into a sorted list of files.

    Args:
        paths: Glob patterns of documentation to include
        ignore: Glob patterns to exclude
        root: Directory the patterns are relative to

    Returns:
        File paths relative to root
    """
    root = Path(root)
    ignored: Set[str] = set()
    for pattern in ignore:
        ignored.update(glob.glob(pattern, root_dir=root, recursive=True))

    files: Set[str] = set()
    for pattern in paths:
        # ":docstrings" selects in-code docs, which are not searched yet
        pattern = pattern.removesuffix(":docstrings")
        if not pattern:
            continue
        try:
            matches = glob.glob(pattern, root_dir=root, recursive=True)
        except (ValueError, OSError) as e:
            logger.warning(f"Invalid glob pattern '{pattern}': {e}")
            continue
        for match in matches:
            if match in ignored or not (root / match).is_file():
                continue
            files.add(match)

    return sorted(files)


_MATCH_SEPARATOR = re.compile(r":(\d+):")
_CONTEXT_SEPARATOR = re.compile(r"-(\d+)-")
_LINE_NUMBER = re.compile(r"([:-])(\d+)\1")


def parse_rg_line(
    line: str,
    files: Optional[Sequence[str]] = None,
) -> Optional[Tuple[str, int, str]]:
    """
    Parse one line of `rg --line-number --no-heading` output.

    Match lines look like "path:12:content", context lines like
    "path-12-content". File names may themselves contain "-12-"
    ("2024-01-15-release.md"), so when the searched files are known the
    longest one that prefixes the line wins. Otherwise a ":N:" separator is
    looked for over the whole line before falling back to "-N-".

    Args:
        line: One output line
        files: Paths exactly as they were passed to rg

    Returns:
        (file, line_number, content), or None for anything else
    """
    if files:
        best = None
        for file in files:
            if best is not None and len(file) <= len(best[0]):
                continue
            if not line.startswith(file):
                continue
            match = _LINE_NUMBER.match(line, len(file))
            if match is not None:
                best = (file, int(match.group(2)), line[match.end():])
        return best

    for pattern in (_MATCH_SEPARATOR, _CONTEXT_SEPARATOR):
        match = pattern.search(line)
        if match is not None and match.start() > 0:
            return line[:match.start()], int(match.group(1)), line[match.end():]
    return None


def _create_chunk(file: str, lines: List[Tuple[int, str]]) -> DocChunk:
    return DocChunk(
        file=file,
        start_line=lines[0][0],
        end_line=lines[-1][0],
        content="\n".join(content for _, content in lines),
    )


def parse_ripgrep_output(output: str, files: Optional[Sequence[str]] = None) -> List[DocChunk]:
    """
    Group ripgrep output into chunks split at `--` lines and file changes.

    `files` is the list passed to rg, used to find where each path ends.
    """
    chunks: List[DocChunk] = []
    current_file: Optional[str] = None
    current_lines: List[Tuple[int, str]] = []

    for line in output.splitlines():
        if line == "--":
            if current_file is not None and current_lines:
                chunks.append(_create_chunk(current_file, current_lines))
                current_lines = []
            continue

        parsed = parse_rg_line(line, files)
        if parsed is None:
            continue
        file, line_num, content = parsed
        if file != current_file:
            if current_file is not None and current_lines:
                chunks.append(_create_chunk(current_file, current_lines))
                current_lines = []
            current_file = file
        current_lines.append((line_num, content))

    if current_file is not None and current_lines:
        chunks.append(_create_chunk(current_file, current_lines))

    return chunks


def merge_adjacent_chunks(
    chunks: Sequence[DocChunk],
    distance: int = MERGE_DISTANCE,
) -> List[DocChunk]:
    """
    Merge sorted same-file chunks that start within `distance` lines of the
    previous chunk's end.

    Input must be sorted by (file, start_line).
    """
    merged: List[DocChunk] = []
    for chunk in chunks:
        if merged:
            last = merged[-1]
            if last.file == chunk.file and chunk.start_line <= last.end_line + distance:
                merged[-1] = DocChunk(
                    file=last.file,
                    start_line=last.start_line,
                    end_line=max(last.end_line, chunk.end_line),
                    content=last.content + CHUNK_SEPARATOR + chunk.content,
                )
                continue
        merged.append(DocChunk(chunk.file, chunk.start_line, chunk.end_line, chunk.content))
    return merged


async def search_query(
    query: str,
    files: Sequence[str],
    root: Union[str, Path] = ".",
    context_lines: int = 3,
) -> List[DocChunk]:
    """
    Run ripgrep for one query over an explicit file list.

    Raises:
        SearchError: If rg cannot be started or exits with an error
    """
    try:
        process = await asyncio.create_subprocess_exec(
            "rg",
            "--line-number",
            "--with-filename",
            "--no-heading",
            "--color=never",
            "-C", str(context_lines),
            "--",
            query,
            *files,
            cwd=str(root),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
    except OSError as e:
        raise SearchError(str(e)) from e

    # rg exits 1 when nothing matched
    if process.returncode not in (0, 1):
        raise SearchError(stderr.decode("utf-8", errors="replace").strip())

    return parse_ripgrep_output(stdout.decode("utf-8", errors="replace"), files)


async def find_relevant_docs(
    config: DocsConfig,
    queries: Sequence[str],
    root: Union[str, Path] = ".",
) -> List[DocChunk]:
    """
    Find documentation excerpts mentioning any of the queries.

    Every query is searched concurrently. A failing query is logged and
    dropped; the others still contribute.

    Args:
        config: Documentation paths and context settings
        queries: Search patterns
        root: Repository root the doc patterns are relative to

    Returns:
        Deduplicated chunks sorted by (file, start_line), with nearby
        chunks of the same file merged

    Raises:
        RipgrepNotFoundError: If rg is not installed
    """
    check_ripgrep()

    doc_files = expand_doc_paths(config.paths, config.ignore, root)
    if not doc_files:
        logger.debug("No documentation files found")
        return []

    logger.debug(f"Searching {len(doc_files)} doc files with {len(queries)} queries")
    logger.debug(f"Doc files: {doc_files}")
    logger.debug(f"Search queries: {list(queries)}")

    tasks = [
        search_query(query, doc_files, root, config.context_lines)
        for query in queries
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    all_chunks: List[DocChunk] = []
    seen: Set[Tuple[str, int]] = set()
    for query, result in zip(queries, results):
        if isinstance(result, Exception):
            logger.warning(f"Search query '{query}' failed: {result}")
            continue
        for chunk in result:
            key = (chunk.file, chunk.start_line)
            if key in seen:
                continue
            seen.add(key)
            all_chunks.append(chunk)

    all_chunks.sort(key=lambda c: (c.file, c.start_line))
    return merge_adjacent_chunks(all_chunks)


# Synchronous wrapper for non-async contexts
def find_relevant_docs_sync(
    config: DocsConfig,
    queries: Sequence[str],
    root: Union[str, Path] = ".",
) -> List[DocChunk]:
    """Synchronous wrapper for find_relevant_docs."""
    return asyncio.run(find_relevant_docs(config, queries, root))
