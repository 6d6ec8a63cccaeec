"""Work branch naming and creation for labeled issues.

Names look like ``<prefix><issue>-<title-slug>-<seq>`` and never exceed
MAX_BRANCH_LENGTH. The sequence number counts existing branches of the same
issue, so relabeling an issue yields a fresh branch.
"""

import logging
import re

from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError

MAX_BRANCH_LENGTH = 32
MAX_CREATE_ATTEMPTS = 5

_INVALID_TITLE_CHARS_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_DOUBLE_DASH_RE = re.compile(r"-+")


def sanitize_issue_title(title: str) -> str:
    """Slug of an issue title: lowercase, only ``a-z``, digits and single
    dashes, no leading or trailing dash.

    Returns an empty string when nothing valid is left.
    """
    s = _INVALID_TITLE_CHARS_RE.sub("", (title or "").lower())
    s = _WHITESPACE_RE.sub("-", s)
    s = _DOUBLE_DASH_RE.sub("-", s)
    return s.strip("-")


def issue_branch_prefix(prefix: str, issue_number: int) -> str:
    return f"{prefix}{issue_number}-"


def build_branch_name(prefix: str, issue_number: int, sanitized_title: str, sequence: int) -> str:
    """Join the parts, truncating the title so the whole name fits."""
    base = issue_branch_prefix(prefix, issue_number)
    suffix = f"-{sequence}"
    max_title_length = MAX_BRANCH_LENGTH - len(base) - len(suffix)
    if max_title_length <= 0:
        title = ""
    elif len(sanitized_title) > max_title_length:
        title = sanitized_title[:max_title_length].rstrip("-")
    else:
        title = sanitized_title
    return f"{base}{title}{suffix}"


def next_sequence_number(adapter: GitPlatformAdapter, repo: str, prefix: str, issue_number: int) -> int:
    """Count existing branches of the issue and return count + 1."""
    existing = adapter.list_matching_branches(repo, issue_branch_prefix(prefix, issue_number))
    return len(existing) + 1


def generate_branch_name(
    adapter: GitPlatformAdapter,
    repo: str,
    issue_number: int,
    issue_title: str,
    prefix: str,
) -> str:
    """Next branch name for the issue, based on the branches that exist now.

    Not idempotent: the result depends on current repository state.
    """
    sequence = next_sequence_number(adapter, repo, prefix, issue_number)
    return build_branch_name(prefix, issue_number, sanitize_issue_title(issue_title), sequence)


def _is_ref_conflict(error: GitPlatformError) -> bool:
    return error.status_code == 422 and "already exists" in str(error).lower()


def create_issue_branch(
    adapter: GitPlatformAdapter,
    repo: str,
    issue_number: int,
    issue_title: str,
    prefix: str,
    sha: str,
    max_attempts: int = MAX_CREATE_ATTEMPTS,
    log: logging.Logger | None = None,
) -> str:
    """Create the next branch for the issue at sha and return its name.

    If another delivery created the same name first, the next sequence
    number is tried, up to max_attempts names.
    """
    logger = log or logging.getLogger("ghrelay.services.branch")
    sanitized = sanitize_issue_title(issue_title)
    sequence = next_sequence_number(adapter, repo, prefix, issue_number)
    for attempt in range(1, max_attempts + 1):
        name = build_branch_name(prefix, issue_number, sanitized, sequence)
        try:
            adapter.create_branch(repo, name, sha)
        except GitPlatformError as e:
            if not _is_ref_conflict(e) or attempt == max_attempts:
                raise
            logger.warning("Branch %s already exists, retrying with sequence %s", name, sequence + 1)
            sequence += 1
            continue
        logger.info("Branch created: %s", name)
        return name
    raise GitPlatformError(f"Could not create a branch for issue #{issue_number}")
