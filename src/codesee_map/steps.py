from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from .config import MapActionConfig
from .context import GitHubEvent
from .insights import InsightsCollector, needs_insights
from .logging import MapActionLogger
from .models import InsightsDecision, Step
from .preflight import check_api_token, check_fork_policy
from .tool import MapTool


@dataclass(frozen=True)
class RunContext:
    config: MapActionConfig
    event: GitHubEvent
    tool: MapTool
    logger: MapActionLogger
    insights_collector: Optional[InsightsCollector] = None


Action = Callable[[RunContext], Awaitable[None]]


async def require_api_token(run: RunContext) -> None:
    check_api_token(run.config, run.logger)


async def generate(run: RunContext) -> None:
    with run.logger.group("Generate Map Data"):
        exclude_langs, reason = check_fork_policy(run.event, run.config)
        if reason == "fork_pr_insecure":
            run.logger.info(
                "Detected Forked PR with potential insecure configuration, disabling python"
            )
            run.logger.info("Consider updating your workflow to the latest version from CodeSee.")
        elif reason == "pr_secure":
            run.logger.info("Detected no insecure configuration, allowing all languages")

        exit_code = await run.tool.generate_map(exclude_langs)
        if exit_code != 0:
            run.logger.warning("Map generation exited with a non-zero code", exit_code=exit_code)


async def upload(run: RunContext) -> None:
    if run.config.skip_upload:
        run.logger.info("Skipping map upload")
        return
    with run.logger.group("Upload Map to Codesee Server"):
        exit_code = await run.tool.upload_map(run.event)
        if exit_code != 0:
            run.logger.warning("Map upload exited with a non-zero code", exit_code=exit_code)


async def insights(run: RunContext) -> None:
    if run.event.is_pull_request:
        run.logger.info("Running on a pull request so skipping insight collection")
        return

    decision = await needs_insights(run.tool)
    if decision == InsightsDecision.DISABLED:
        run.logger.info("Insights are disabled for this repository")
        return

    collector = run.insights_collector or InsightsCollector(run.tool)
    with run.logger.group("Collect Insights"):
        await collector.run()


def resolve_step(name: str) -> Optional[Step]:
    try:
        return Step(name)
    except ValueError:
        return None


def plan_for(step: Step) -> Tuple[Action, ...]:
    """Ordered actions run for ``step``."""
    if step is Step.MAP:
        return (generate,)
    if step is Step.MAP_UPLOAD:
        return (require_api_token, upload)
    if step is Step.INSIGHTS:
        return (require_api_token, insights)
    if step is Step.LEGACY:
        return (require_api_token, generate, upload, insights)
    raise AssertionError(f"Unhandled step: {step!r}")


def unknown_step_message(name: str) -> str:
    valid = ", ".join(s.value for s in Step)
    return f"Unable to find run configuration for {name}. Should be one of {valid}"


async def run_plan(step: Step, run: RunContext) -> None:
    """Run the step's actions strictly in order; the first exception aborts the rest."""
    for action in plan_for(step):
        run.logger.info(f"Running step {action.__name__}")
        await action(run)
