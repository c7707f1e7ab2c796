from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .logging import MapActionLogger
from .models import InsightsDecision
from .tool import MapTool


def decide_from_metadata(metadata: Any) -> InsightsDecision:
    """Map the metadata document written by the tool to an insights decision."""
    if not isinstance(metadata, dict):
        raise ValueError("metadata is not a JSON object")
    if metadata.get("insightsDisabled"):
        return InsightsDecision.DISABLED
    insights = metadata.get("insights")
    if not isinstance(insights, list):
        raise ValueError("metadata has no insights list")
    return InsightsDecision.NEEDED if len(insights) == 0 else InsightsDecision.NOT_NEEDED


def read_metadata_decision(path: Path, logger: MapActionLogger) -> InsightsDecision:
    try:
        metadata = json.loads(path.read_text(encoding="utf-8"))
        return decide_from_metadata(metadata)
    except (OSError, ValueError) as exc:
        logger.warning(
            f"\n\n Unable to read metadata for repo, assuming we need insights: {exc}"
        )
        return InsightsDecision.NEEDED


async def needs_insights(tool: MapTool) -> InsightsDecision:
    """
    Ask the service whether this repo still needs insights.

    Fails open: if the metadata cannot be fetched or read we assume insights
    are needed.
    """
    if await tool.fetch_metadata() != 0:
        return InsightsDecision.NEEDED
    return read_metadata_decision(tool.metadata_path, tool.logger)


class InsightsCollector:
    """Computes insights with the CLI and sends them to the service."""

    def __init__(self, tool: MapTool) -> None:
        self.tool = tool

    async def run(self) -> int:
        exit_code = await self.tool.collect_insights()
        if exit_code != 0:
            self.tool.logger.warning("Insight collection failed", exit_code=exit_code)
            return exit_code
        return await self.tool.upload_insights()
