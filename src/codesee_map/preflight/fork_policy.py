from __future__ import annotations

from typing import List, Tuple

from ..config import MapActionConfig
from ..constants import CODE_EXECUTING_LANGUAGES
from ..context import GitHubEvent


def is_insecure_configuration(config: MapActionConfig) -> bool:
    """
    Whether mapping could run repository code while a token is available.

    Python analysis may execute user-supplied code, so a token plus Python
    enabled is the combination we must not expose to a fork.
    """
    return config.has_api_token and bool(config.languages.get("python"))


def check_fork_policy(
    event: GitHubEvent,
    config: MapActionConfig,
) -> Tuple[List[str], str]:
    """
    Decide which languages to exclude from the mapping pass.

    Returns:
        (excluded_languages, reason)
        reason: "fork_pr_insecure", "pr_secure", "not_pr"
    """
    if event.is_forked_pull_request and is_insecure_configuration(config):
        return list(CODE_EXECUTING_LANGUAGES), "fork_pr_insecure"
    if event.is_pull_request:
        return [], "pr_secure"
    return [], "not_pr"
