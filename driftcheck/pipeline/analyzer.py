"""Analysis pipeline: diff -> search queries -> doc search -> consistency check."""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import DriftcheckConfig
from ..errors import CacheError
from ..models import DocChunk, Issue
from ..tools.diff_parser import is_docs_only_diff, parse_diff
from ..tools.llm_client import LLMClient
from ..tools.query_cache import QueryCache
from ..tools import search
from ..utils.logging import get_logger
from ..utils.progress import MultiProgress
from .prompts import analyze_consistency, generate_search_queries

logger = get_logger(__name__)

CHARS_PER_TOKEN = 4

ANALYSIS_STEPS = [
    "Generating search queries",
    "Searching documentation",
    "Analyzing consistency",
]


def truncate_to_budget(chunks: Sequence[DocChunk], max_tokens: int) -> List[DocChunk]:
    """
    Keep as many chunks as fit in roughly `max_tokens` tokens.

    Smaller chunks are taken first as they tend to be the most focused.
    When even the smallest chunk is over budget, a truncated copy of it is
    returned so the model always sees something.

    Args:
        chunks: Candidate chunks
        max_tokens: Token budget, estimated at 4 characters per token

    Returns:
        Chunks in ascending content-length order
    """
    chars_budget = max_tokens * CHARS_PER_TOKEN
    total_chars = 0
    result: List[DocChunk] = []

    for chunk in sorted(chunks, key=lambda c: len(c.content)):
        chunk_chars = len(chunk.content)
        if total_chars + chunk_chars > chars_budget:
            if not result:
                result.append(DocChunk(
                    file=chunk.file,
                    start_line=chunk.start_line,
                    end_line=chunk.end_line,
                    content=chunk.content[:chars_budget],
                ))
            break
        total_chars += chunk_chars
        result.append(chunk)

    return result


async def _get_queries(
    config: DriftcheckConfig,
    client: LLMClient,
    diff: str,
    root: Path,
    progress: MultiProgress,
) -> List[str]:
    if not config.cache.enabled:
        return await generate_search_queries(client, config, diff)

    cache = QueryCache(config.cache_dir(root), config.cache.ttl)
    cached = cache.get(diff)
    if cached is not None:
        logger.debug("Using cached search queries")
        progress.update("using cache")
        return cached

    logger.debug("Generating new search queries")
    queries = await generate_search_queries(client, config, diff)
    try:
        cache.put(diff, queries)
    except CacheError as e:
        logger.warning(f"Failed to cache queries: {e}")
    return queries


async def analyze(
    config: DriftcheckConfig,
    diff: str,
    root: Union[str, Path] = ".",
    client: Optional[LLMClient] = None,
    progress: Optional[MultiProgress] = None,
    recent_commits: str = "",
) -> List[Issue]:
    """
    Run the full analysis pipeline.

    Args:
        config: Loaded configuration
        diff: Unified diff of the changes being pushed
        root: Repository root (doc globs and cache dir are relative to it)
        client: Model client (default: built from config.llm)
        progress: Progress display (default: three-step stderr spinner)
        recent_commits: Recent git log, sent as context to the analysis

    Returns:
        Issues in the order the model reported them
    """
    parsed = parse_diff(diff)
    if parsed.is_empty:
        logger.debug("No files changed in diff")
        return []

    root = Path(root)
    logger.info(f"Analyzing changes to {len(parsed.files)} files")
    if is_docs_only_diff(parsed):
        logger.info("Only documentation changed")

    client = client or LLMClient(config.llm)
    progress = progress or MultiProgress(ANALYSIS_STEPS)

    try:
        # Step 1: Generate search queries
        progress.next_step()
        queries = await _get_queries(config, client, diff, root, progress)

        if not queries:
            logger.debug("No search queries generated")
            return []

        logger.info(f"Generated {len(queries)} search queries")

        # Step 2: Search documentation
        progress.next_step()
        progress.update(f"{len(queries)} queries")
        chunks = await search.find_relevant_docs(config.docs, queries, root)

        if not chunks:
            logger.debug("No relevant documentation found")
            return []

        logger.info(f"Found {len(chunks)} documentation chunks")
        chunks = truncate_to_budget(chunks, config.docs.max_context_tokens)

        # Step 3: Analyze consistency
        progress.next_step()
        progress.update(f"{len(chunks)} doc chunks")
        issues = await analyze_consistency(client, config, diff, chunks, recent_commits)
    finally:
        progress.finish()

    if issues:
        logger.info(f"Found {len(issues)} potential issues")
    return issues


# Synchronous wrapper for non-async contexts
def analyze_sync(
    config: DriftcheckConfig,
    diff: str,
    root: Union[str, Path] = ".",
    client: Optional[LLMClient] = None,
    progress: Optional[MultiProgress] = None,
    recent_commits: str = "",
) -> List[Issue]:
    """Synchronous wrapper for analyze."""
    return asyncio.run(analyze(config, diff, root, client, progress, recent_commits))
