"""Generate and write a documentation fix for one issue."""

from pathlib import Path
from typing import Optional, Union

from ..config import DriftcheckConfig
from ..errors import FixApplicationError
from ..models import Issue
from ..tools.llm_client import LLMClient
from ..utils.logging import get_logger
from .prompts import generate_fix
from .response_parser import strip_code_fence

logger = get_logger(__name__)


def resolve_issue_path(issue: Issue, root: Union[str, Path]) -> Path:
    path = Path(issue.file)
    return path if path.is_absolute() else Path(root) / path


async def apply_fix(
    config: DriftcheckConfig,
    issue: Issue,
    root: Union[str, Path] = ".",
    client: Optional[LLMClient] = None,
) -> str:
    """
    Rewrite the documentation file named by the issue.

    The file is read, the model returns a complete replacement, and the
    file is overwritten wholesale. No locking is done.

    Returns:
        Status message for the review screen

    Raises:
        FixApplicationError: If the file cannot be read or written, or the
            model returned nothing
    """
    path = resolve_issue_path(issue, root)

    try:
        original = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FixApplicationError(issue.file, f"Failed to read: {e}") from e

    client = client or LLMClient(config.llm)
    response = await generate_fix(client, config, issue, original)

    fixed = strip_code_fence(response, original)
    if not fixed.strip():
        raise FixApplicationError(issue.file, "Model returned an empty document")

    if original.endswith("\n") and not fixed.endswith("\n"):
        fixed += "\n"

    try:
        path.write_text(fixed, encoding="utf-8")
    except OSError as e:
        raise FixApplicationError(issue.file, f"Failed to write: {e}") from e

    logger.info(f"Applied fix to {issue.file}")
    return f"Applied fix to {issue.file}"
