"""Port for the platform controller API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cfrestart.domain.model import Application, AppState, ControllerInfo, RuntimeSummary


@runtime_checkable
class ControllerApi(Protocol):
    """Synchronous request/response operations against the controller.

    Implementations raise ``TransientError`` for network and server failures,
    ``NotFoundError`` for missing resources and ``ControllerAPIError`` otherwise.
    """

    def get_info(self) -> ControllerInfo: ...

    def find_space_guid(self, organization: str, space: str) -> str | None: ...

    def find_application(self, name: str, space_guid: str) -> Application | None: ...

    def get_app_summary(self, app_guid: str) -> RuntimeSummary: ...

    def update_app_state(self, app_guid: str, state: AppState) -> None: ...


__all__ = ["ControllerApi"]
