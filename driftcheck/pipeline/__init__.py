"""Analysis pipeline for documentation drift."""

from .analyzer import analyze, analyze_sync, truncate_to_budget
from .fix import apply_fix
from .prompts import (
    generate_search_queries,
    analyze_consistency,
    generate_fix,
    format_doc_chunks,
)
from .response_parser import parse_search_queries, parse_issues, strip_code_fence

__all__ = [
    "analyze",
    "analyze_sync",
    "truncate_to_budget",
    "apply_fix",
    "generate_search_queries",
    "analyze_consistency",
    "generate_fix",
    "format_doc_chunks",
    "parse_search_queries",
    "parse_issues",
    "strip_code_fence",
]
