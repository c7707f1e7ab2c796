from __future__ import annotations

import asyncio
import os
import sys
import uuid
from pathlib import Path
from typing import Optional

from .config import MapActionConfig, load_config
from .constants import ExitCode
from .context import GitHubEvent
from .errors import MapActionError
from .logging import MapActionLogger
from .steps import RunContext, resolve_step, run_plan, unknown_step_message
from .tool import MapTool

ACTION_VERSION = "1.0.0"


def main() -> int:
    """Main entry point."""
    return asyncio.run(async_main())


async def setup(
    config: MapActionConfig,
    logger: MapActionLogger,
    working_dir: Optional[Path] = None,
) -> RunContext:
    """Check out the head ref and load the triggering event."""
    tool = MapTool(config, logger, working_dir=working_dir)
    with logger.group("Setup"):
        logger.debug("CONFIG:", config=config.model_dump(mode="json"))
        await tool.checkout()
        event = GitHubEvent.load(config.event_name, config.event_data_path)
    return RunContext(config=config, event=event, tool=tool, logger=logger)


async def async_main(working_dir: Optional[Path] = None) -> int:
    """
    Async main entry point.

    Fatal errors (bad configuration, missing token, failed checkout) are logged
    with their stack trace and turned into a non-zero exit code. Non-zero exit
    codes from the CodeSee CLI itself are only reported as warnings.
    """
    logger = MapActionLogger(str(uuid.uuid4()))
    workspace = working_dir or Path(os.environ.get("GITHUB_WORKSPACE") or os.getcwd())

    try:
        config = load_config()
        logger.add_mask(config.api_token.get_secret_value())

        step = resolve_step(config.step)
        if step is None:
            logger.error(unknown_step_message(config.step))
            return ExitCode.SUCCESS

        logger.info(
            "CodeSee Map starting",
            version=ACTION_VERSION,
            step=step.value,
            repo=config.repo_full_name,
            event_name=config.event_name,
        )
        run = await setup(config, logger, working_dir=workspace)
        await run_plan(step, run)
    except MapActionError as exc:
        logger.exception("CodeSee Map failed", exc)
        return exc.exit_code
    except Exception as exc:
        logger.exception("CodeSee Map failed", exc)
        return ExitCode.ERROR

    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
