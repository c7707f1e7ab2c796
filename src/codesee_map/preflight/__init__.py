"""Preflight checks for credentials and fork safety."""

from .credentials import check_api_token
from .fork_policy import check_fork_policy, is_insecure_configuration

__all__ = [
    "check_api_token",
    "check_fork_policy",
    "is_insecure_configuration",
]
