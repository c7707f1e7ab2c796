from __future__ import annotations

from enum import Enum


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 2


class ToolFiles:
    """Files the mapping tool writes into the working directory."""

    MAP = "codesee.map.json"
    METADATA = "codesee.metadata.json"
    INSIGHTS = "codesee.insights.json"


TOOL_RUNNER = "npx"
TOOL_PACKAGE = "codesee@latest"

TRUTHY_LITERALS = ("true", "True", "TRUE")

# Placeholder the workflow passes when no webpack config is set.
NULL_INPUT = "__NULL__"

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})

# Languages whose analysis may execute code from the repository under scan.
CODE_EXECUTING_LANGUAGES = ("python",)
