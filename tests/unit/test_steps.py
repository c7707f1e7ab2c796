from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from codesee_map.config import MapActionConfig
from codesee_map.context import GitHubEvent
from codesee_map.errors import ApiTokenRequiredError
from codesee_map.logging import MapActionLogger
from codesee_map.models import Step
from codesee_map.steps import (
    RunContext,
    plan_for,
    resolve_step,
    run_plan,
    unknown_step_message,
)
from codesee_map.tool import MapTool


class RecordingTool(MapTool):
    def __init__(self, config: MapActionConfig, tmp_path: Path) -> None:
        super().__init__(config, MapActionLogger("run-1"), working_dir=tmp_path)
        self.calls: list[str] = []
        self.excluded: list[str] = []

    async def generate_map(self, exclude_langs: Sequence[str] = ()) -> int:
        self.calls.append("generate")
        self.excluded = list(exclude_langs)
        return 0

    async def upload_map(self, event: GitHubEvent) -> int:
        self.calls.append("upload")
        return 0

    async def fetch_metadata(self) -> int:
        self.calls.append("metadata")
        self.metadata_path.write_text('{"insights": []}', encoding="utf-8")
        return 0

    async def collect_insights(self) -> int:
        self.calls.append("insight")
        return 0

    async def upload_insights(self) -> int:
        self.calls.append("upload_insights")
        return 0


def _run(tmp_path: Path, config: MapActionConfig, event: GitHubEvent) -> RunContext:
    tool = RecordingTool(config, tmp_path)
    return RunContext(config=config, event=event, tool=tool, logger=tool.logger)


def test_plans_are_fixed() -> None:
    assert [a.__name__ for a in plan_for(Step.MAP)] == ["generate"]
    assert [a.__name__ for a in plan_for(Step.MAP_UPLOAD)] == ["require_api_token", "upload"]
    assert [a.__name__ for a in plan_for(Step.INSIGHTS)] == ["require_api_token", "insights"]
    assert [a.__name__ for a in plan_for(Step.LEGACY)] == [
        "require_api_token",
        "generate",
        "upload",
        "insights",
    ]


def test_resolve_step() -> None:
    assert resolve_step("mapUpload") is Step.MAP_UPLOAD
    assert resolve_step("legacy") is Step.LEGACY
    assert resolve_step("bogus") is None
    assert resolve_step("MAP") is None


def test_unknown_step_message_lists_valid_steps() -> None:
    assert unknown_step_message("bogus") == (
        "Unable to find run configuration for bogus. "
        "Should be one of map, mapUpload, insights, legacy"
    )


@pytest.mark.anyio
async def test_map_upload_without_token_aborts_before_any_command(tmp_path: Path) -> None:
    run = _run(tmp_path, MapActionConfig(), GitHubEvent(name="push"))

    with pytest.raises(ApiTokenRequiredError):
        await run_plan(Step.MAP_UPLOAD, run)

    assert run.tool.calls == []


@pytest.mark.anyio
async def test_legacy_runs_generate_upload_insights_in_order(tmp_path: Path) -> None:
    run = _run(tmp_path, MapActionConfig(api_token="tok"), GitHubEvent(name="push"))

    await run_plan(Step.LEGACY, run)

    assert run.tool.calls == ["generate", "upload", "metadata", "insight", "upload_insights"]


@pytest.mark.anyio
async def test_map_step_needs_no_token(tmp_path: Path) -> None:
    run = _run(tmp_path, MapActionConfig(), GitHubEvent(name="push"))

    await run_plan(Step.MAP, run)

    assert run.tool.calls == ["generate"]


@pytest.mark.anyio
async def test_pull_requests_never_collect_insights(tmp_path: Path, capsys) -> None:
    event = GitHubEvent(name="pull_request", payload={"number": 1})
    run = _run(tmp_path, MapActionConfig(api_token="tok"), event)

    await run_plan(Step.LEGACY, run)

    assert run.tool.calls == ["generate", "upload"]
    assert "skipping insight collection" in capsys.readouterr().err


@pytest.mark.anyio
async def test_disabled_insights_skip_collection(tmp_path: Path) -> None:
    run = _run(tmp_path, MapActionConfig(api_token="tok"), GitHubEvent(name="push"))

    async def disabled_metadata() -> int:
        run.tool.calls.append("metadata")
        run.tool.metadata_path.write_text('{"insightsDisabled": true}', encoding="utf-8")
        return 0

    run.tool.fetch_metadata = disabled_metadata

    await run_plan(Step.INSIGHTS, run)

    assert run.tool.calls == ["metadata"]


@pytest.mark.anyio
async def test_existing_insights_still_collect(tmp_path: Path) -> None:
    # Only the disabled sentinel skips collection; existing insights do not.
    run = _run(tmp_path, MapActionConfig(api_token="tok"), GitHubEvent(name="push"))

    async def populated_metadata() -> int:
        run.tool.calls.append("metadata")
        run.tool.metadata_path.write_text('{"insights": [{"id": 1}]}', encoding="utf-8")
        return 0

    run.tool.fetch_metadata = populated_metadata

    await run_plan(Step.INSIGHTS, run)

    assert run.tool.calls == ["metadata", "insight", "upload_insights"]


@pytest.mark.anyio
async def test_skip_upload(tmp_path: Path, capsys) -> None:
    run = _run(tmp_path, MapActionConfig(api_token="tok", skip_upload=True), GitHubEvent(name="push"))

    await run_plan(Step.MAP_UPLOAD, run)

    assert run.tool.calls == []
    assert "Skipping map upload" in capsys.readouterr().err


@pytest.mark.anyio
async def test_forked_pr_disables_python(tmp_path: Path, capsys) -> None:
    event = GitHubEvent(
        name="pull_request_target",
        payload={"number": 9, "pull_request": {"head": {"repo": {"fork": True}}}},
    )
    config = MapActionConfig(api_token="tok", languages={"python": True, "javascript": True})
    run = _run(tmp_path, config, event)

    await run_plan(Step.MAP, run)

    assert run.tool.excluded == ["python"]
    assert "disabling python" in capsys.readouterr().err
