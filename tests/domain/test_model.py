from __future__ import annotations

import pytest

from cfrestart.domain.errors import StagingFailedError
from cfrestart.domain.model import (
    AppState,
    MonitorOutcome,
    PackageState,
    RestartResult,
    RestartTarget,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("STARTED", AppState.STARTED),
        ("stopped", AppState.STOPPED),
        ("CRASHED", AppState.UNKNOWN),
        (None, AppState.UNKNOWN),
    ],
)
def test_app_state_parse(raw: str | None, expected: AppState) -> None:
    assert AppState.parse(raw) is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("PENDING", PackageState.PENDING),
        ("STAGED", PackageState.STAGED),
        ("FAILED", PackageState.FAILED),
        ("", PackageState.UNKNOWN),
    ],
)
def test_package_state_parse(raw: str | None, expected: PackageState) -> None:
    assert PackageState.parse(raw) is expected


def test_restart_target_trims_names() -> None:
    target = RestartTarget.from_names("  demo-org ", "dev\n", None)

    assert target.organization == "demo-org"
    assert target.space == "dev"
    assert target.missing_fields() == ("application",)


def test_restart_result_success_rules() -> None:
    assert RestartResult(MonitorOutcome.RUNNING).succeeded
    assert RestartResult(MonitorOutcome.CANCELLED).succeeded
    assert not RestartResult(
        MonitorOutcome.STAGING_FAILED, error=StagingFailedError("App staging failed")
    ).succeeded
    assert not RestartResult(None, error=RuntimeError("boom")).succeeded
