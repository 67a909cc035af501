"""Translate Cloud Controller payloads into domain objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cfrestart.domain.model import (
    Application,
    AppState,
    ControllerInfo,
    PackageState,
    RuntimeSummary,
)

if TYPE_CHECKING:
    from .schema import AppSummaryResponse, InfoResponse, Resource


def parse_controller_info(payload: InfoResponse) -> ControllerInfo:
    return ControllerInfo(
        doppler_logging_endpoint=payload.doppler_logging_endpoint,
        logging_endpoint=payload.logging_endpoint,
    )


def parse_application(resource: Resource) -> Application:
    return Application(name=resource.entity.name, guid=resource.metadata.guid)


def parse_runtime_summary(payload: AppSummaryResponse) -> RuntimeSummary:
    return RuntimeSummary(
        state=AppState.parse(payload.state),
        running_instances=payload.running_instances,
        package_state=PackageState.parse(payload.package_state),
    )
