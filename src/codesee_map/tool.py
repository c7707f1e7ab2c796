from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Optional, Sequence

from .config import MapActionConfig
from .constants import TOOL_PACKAGE, TOOL_RUNNER, ToolFiles
from .context import GitHubEvent
from .errors import CheckoutError
from .logging import MapActionLogger
from .models import CommandResult


async def run_command(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    timeout_s: Optional[float] = None,
) -> CommandResult:
    """Run a command with its output streamed straight to the job log."""
    args = list(args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError:
        return CommandResult(args=args, returncode=127, error="command not found")

    try:
        await asyncio.wait_for(proc.wait(), timeout=timeout_s)
    except TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        return CommandResult(args=args, returncode=-1, timed_out=True, error=f"timed out after {timeout_s}s")

    return CommandResult(args=args, returncode=int(proc.returncode or 0))


def _tool(*args: str) -> list[str]:
    return [TOOL_RUNNER, TOOL_PACKAGE, *args]


def build_map_args(
    config: MapActionConfig,
    exclude_langs: Sequence[str],
    working_dir: str,
) -> list[str]:
    args = _tool("map", "-o", ToolFiles.MAP)
    if exclude_langs:
        args += ["-x", ",".join(exclude_langs)]
    if config.webpack_config_path:
        args += ["-w", config.webpack_config_path]
    if config.support_typescript:
        args.append("--typescript")
    if config.has_api_token:
        args += ["-a", config.api_token.get_secret_value()]
    if config.languages:
        args += ["--languages", json.dumps(config.languages)]
    if config.codesee_url:
        args += ["--url", config.codesee_url]
    args += ["--repo", config.repo_origin]
    args.append(working_dir)
    return args


def build_upload_args(
    config: MapActionConfig,
    event: GitHubEvent,
    logger: Optional[MapActionLogger] = None,
) -> list[str]:
    extra: list[str] = []
    if config.github_ref:
        extra += ["-f", config.github_ref]

    if event.is_pull_request:
        pr_flags = (
            ("-b", config.github_base_ref),
            ("-s", event.base_sha),
            ("-p", str(event.pr_number) if event.pr_number is not None else None),
        )
        for flag, value in pr_flags:
            if value:
                extra += [flag, value]
            elif logger:
                logger.warning("Pull request upload flag has no value; omitting it", flag=flag)

    args = _tool(
        "upload",
        "--type",
        "map",
        "--repo",
        config.repo_origin,
        "-a",
        config.api_token.get_secret_value(),
        *extra,
        ToolFiles.MAP,
    )
    if config.codesee_url:
        args += ["--url", config.codesee_url]
    return args


def build_metadata_args(config: MapActionConfig) -> list[str]:
    args = _tool(
        "metadata",
        "--repo",
        config.repo_origin,
        "-a",
        config.api_token.get_secret_value(),
        "-o",
        ToolFiles.METADATA,
    )
    if config.codesee_url:
        args += ["--url", config.codesee_url]
    return args


def build_insight_args(config: MapActionConfig) -> list[str]:
    args = _tool(
        "insight",
        "-o",
        ToolFiles.INSIGHTS,
        "--repo",
        config.repo_origin,
        "-a",
        config.api_token.get_secret_value(),
    )
    if config.codesee_url:
        args += ["--url", config.codesee_url]
    return args


def build_insights_upload_args(config: MapActionConfig) -> list[str]:
    args = _tool(
        "upload",
        "--type",
        "insights",
        "--repo",
        config.repo_origin,
        "-a",
        config.api_token.get_secret_value(),
        ToolFiles.INSIGHTS,
    )
    if config.codesee_url:
        args += ["--url", config.codesee_url]
    return args


class MapTool:
    """Runs git and the CodeSee CLI for a single action run."""

    def __init__(
        self,
        config: MapActionConfig,
        logger: MapActionLogger,
        working_dir: Optional[Path] = None,
    ) -> None:
        self.config = config
        self.logger = logger
        self.working_dir = Path(working_dir) if working_dir else Path(os.getcwd())
        self.timeout_s = config.command_timeout

    @property
    def metadata_path(self) -> Path:
        return self.working_dir / ToolFiles.METADATA

    def _redact(self, args: Sequence[str]) -> list[str]:
        secret = self.config.api_token.get_secret_value()
        if not secret:
            return list(args)
        return ["***" if arg == secret else arg for arg in args]

    async def _run(self, args: list[str]) -> CommandResult:
        self.logger.info("Running command", command=" ".join(self._redact(args)))
        result = await run_command(args, cwd=self.working_dir, timeout_s=self.timeout_s)
        if not result.ok:
            self.logger.warning(
                "Command failed",
                command=" ".join(self._redact(args[:3])),
                exit_code=result.returncode,
                error=result.error or "",
            )
        return result

    async def checkout(self) -> None:
        """Check out the head ref so HEAD matches the PR head commit, not the merge ref."""
        ref = self.config.github_ref
        if not ref:
            self.logger.warning("No ref to check out; using the current working tree")
            return
        result = await self._run(["git", "checkout", ref])
        if result.returncode != 0:
            raise CheckoutError(ref, result.returncode)

    async def generate_map(self, exclude_langs: Sequence[str] = ()) -> int:
        args = build_map_args(self.config, exclude_langs, str(self.working_dir))
        return (await self._run(args)).returncode

    async def upload_map(self, event: GitHubEvent) -> int:
        args = build_upload_args(self.config, event, self.logger)
        return (await self._run(args)).returncode

    async def fetch_metadata(self) -> int:
        return (await self._run(build_metadata_args(self.config))).returncode

    async def collect_insights(self) -> int:
        return (await self._run(build_insight_args(self.config))).returncode

    async def upload_insights(self) -> int:
        return (await self._run(build_insights_upload_args(self.config))).returncode
