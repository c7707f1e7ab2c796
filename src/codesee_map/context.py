from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import PULL_REQUEST_EVENTS


def _load_event(event_path: Optional[str]) -> Dict[str, Any]:
    if not event_path:
        return {}
    try:
        data = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def is_pull_request_event(event_name: Optional[str]) -> bool:
    # pull_request_target lets secrets reach forked PRs; pull_request is what
    # older workflows listen for.
    return event_name in PULL_REQUEST_EVENTS


def is_forked_pull_request_event(event_name: Optional[str], payload: Dict[str, Any]) -> bool:
    return is_pull_request_event(event_name) and _dig(payload, "pull_request", "head", "repo", "fork") is True


@dataclass(frozen=True)
class GitHubEvent:
    """Immutable view of the event that triggered the workflow."""

    name: Optional[str]
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, event_name: Optional[str], event_path: Optional[str]) -> "GitHubEvent":
        """Load the event payload; unreadable or malformed files yield an empty payload."""
        return cls(name=event_name, payload=_load_event(event_path))

    @property
    def is_pull_request(self) -> bool:
        return is_pull_request_event(self.name)

    @property
    def is_forked_pull_request(self) -> bool:
        return is_forked_pull_request_event(self.name, self.payload)

    @property
    def pr_number(self) -> Optional[int]:
        value = self.payload.get("number")
        if value is None:
            value = _dig(self.payload, "pull_request", "number")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @property
    def base_sha(self) -> Optional[str]:
        sha = _dig(self.payload, "pull_request", "base", "sha")
        return str(sha) if sha else None
