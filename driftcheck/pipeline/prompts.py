"""Model calls for query generation, consistency analysis and fixes."""

from typing import List, Sequence

from ..config import DriftcheckConfig
from ..models import DocChunk, Issue
from ..tools.llm_client import LLMClient
from .response_parser import parse_issues, parse_search_queries


ANALYSIS_MESSAGE = """## Code Diff (changes being pushed)
```diff
{diff}
```

## Documentation Excerpts
{docs}
"""

RECENT_COMMITS_SECTION = """
## Recent Commits
```
{commits}
```
"""

FIX_MESSAGE = """## Issue
File: {file}
Line: {line}
Problem: {description}

## Suggested Fix
{suggested_fix}

## Current File Content
```
{content}
```

Output the complete fixed file content:"""


def format_doc_chunks(chunks: Sequence[DocChunk]) -> str:
    """Format chunks for the prompt, each under a file and line-range header."""
    return "\n\n".join(f"{chunk.header}\n{chunk.content}" for chunk in chunks)


def build_analysis_message(diff: str, chunks: Sequence[DocChunk], recent_commits: str = "") -> str:
    message = ANALYSIS_MESSAGE.format(diff=diff, docs=format_doc_chunks(chunks))
    if recent_commits.strip():
        message += RECENT_COMMITS_SECTION.format(commits=recent_commits.strip())
    return message


async def generate_search_queries(
    client: LLMClient,
    config: DriftcheckConfig,
    diff: str,
) -> List[str]:
    """Ask the model for search patterns that find docs related to the diff."""
    response = await client.chat(config.prompts.search_queries, diff)
    return parse_search_queries(response)


async def analyze_consistency(
    client: LLMClient,
    config: DriftcheckConfig,
    diff: str,
    chunks: Sequence[DocChunk],
    recent_commits: str = "",
) -> List[Issue]:
    """Ask the model which documentation excerpts the diff has made wrong."""
    if not chunks:
        return []
    message = build_analysis_message(diff, chunks, recent_commits)
    response = await client.chat(config.prompts.analysis, message)
    return parse_issues(response)


async def generate_fix(
    client: LLMClient,
    config: DriftcheckConfig,
    issue: Issue,
    content: str,
) -> str:
    """Ask the model for a complete replacement of the documentation file."""
    message = FIX_MESSAGE.format(
        file=issue.file,
        line=issue.line,
        description=issue.description,
        suggested_fix=issue.suggested_fix or "(none)",
        content=content,
    )
    return await client.chat(config.prompts.fix, message)
