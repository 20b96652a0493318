"""Best-effort extraction of structured data from model replies.

Model output is untrusted free text. The parsers here look for a JSON array
between the first '[' and the last ']', tolerate prose around it, and raise
LLMResponseParseError (never anything else) when nothing usable is found.
"""

import json
import re
from typing import Any, List, Optional

from ..errors import LLMResponseParseError
from ..models import Issue
from ..utils.logging import get_logger

logger = get_logger(__name__)

NO_ISSUES_PHRASES = ("no issues", "no documentation")

_FENCE = re.compile(r"^\s*```[^\n]*\n(.*?)\n?```\s*$", re.DOTALL)


def extract_json_array(text: str) -> Optional[str]:
    """Return the text from the first '[' to the last ']', or None."""
    start = text.find("[")
    if start < 0:
        return None
    end = text.rfind("]")
    if end < start:
        return None
    return text[start:end + 1]


def _load_array(json_str: str) -> List[Any]:
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise LLMResponseParseError(str(e)) from e
    if not isinstance(data, list):
        raise LLMResponseParseError("Expected a JSON array")
    return data


def parse_search_queries(response: str) -> List[str]:
    """
    Parse the query-generation reply into search patterns.

    Non-string items and blanks are dropped; duplicates are removed keeping
    the first occurrence.

    Raises:
        LLMResponseParseError: If the reply holds no JSON array
    """
    json_str = extract_json_array(response.strip())
    if json_str is None:
        raise LLMResponseParseError("No JSON array found in response")

    queries: List[str] = []
    for item in _load_array(json_str):
        if not isinstance(item, str):
            logger.debug(f"Dropping non-string search query: {item!r}")
            continue
        query = item.strip()
        if query and query not in queries:
            queries.append(query)
    return queries


def _coerce_line(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def _to_issue(data: Any) -> Optional[Issue]:
    if not isinstance(data, dict):
        return None
    file = data.get("file")
    description = data.get("description")
    if not isinstance(file, str) or not file.strip():
        return None
    if not isinstance(description, str):
        return None

    doc_excerpt = data.get("doc_excerpt")
    suggested_fix = data.get("suggested_fix")
    return Issue(
        file=file.strip(),
        line=_coerce_line(data.get("line", 0)),
        description=description,
        doc_excerpt=doc_excerpt if isinstance(doc_excerpt, str) else "",
        suggested_fix=suggested_fix if isinstance(suggested_fix, str) and suggested_fix else None,
    )


def parse_issues(response: str) -> List[Issue]:
    """
    Parse the consistency-analysis reply into issues, in reply order.

    Both an empty array and a plain-language "no issues" reply mean no
    issues. Objects missing `file` or `description` are skipped.

    Raises:
        LLMResponseParseError: If the reply is neither an array nor a
            recognisable negative answer
    """
    response = response.strip()

    json_str = extract_json_array(response)
    if json_str is None:
        lowered = response.lower()
        if any(phrase in lowered for phrase in NO_ISSUES_PHRASES):
            return []
        raise LLMResponseParseError("Could not parse issues from response")

    if json_str.strip() == "[]":
        return []

    issues = []
    for i, data in enumerate(_load_array(json_str)):
        issue = _to_issue(data)
        if issue is None:
            logger.warning(f"Skipping malformed issue #{i + 1} in LLM response: {data!r}")
            continue
        issues.append(issue)
    return issues


def strip_code_fence(text: str, original: Optional[str] = None) -> str:
    """
    Remove one ``` fence enclosing the whole text, if present.

    A document that itself opens and closes with code blocks looks the same
    as a wrapped one. When the file being fixed is known, the reply is only
    unwrapped if that file did not start with a fence; otherwise only if
    the inner text has no fence lines of its own.

    Args:
        text: Model reply
        original: Current content of the file being fixed
    """
    match = _FENCE.match(text)
    if match is None:
        return text

    inner = match.group(1)
    if original is not None:
        wrapped = not original.lstrip().startswith("```")
    else:
        wrapped = not any(line.startswith("```") for line in inner.splitlines())
    return inner if wrapped else text
