from __future__ import annotations

from .constants import ExitCode


class MapActionError(Exception):
    """Base exception for all map action errors."""

    exit_code: ExitCode = ExitCode.ERROR


class ConfigError(MapActionError):
    """Configuration could not be resolved from the environment."""


class ApiTokenRequiredError(MapActionError):
    """The selected step needs an API token and none is configured."""

    def __init__(self, message: str = "Api Token Required to continue") -> None:
        super().__init__(message)


class CheckoutError(MapActionError):
    """`git checkout` of the requested ref failed."""

    def __init__(self, ref: str, returncode: int) -> None:
        super().__init__(f"git checkout {ref} failed with exit code {returncode}")
        self.ref = ref
        self.returncode = returncode
