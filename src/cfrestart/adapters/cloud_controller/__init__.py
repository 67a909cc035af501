"""Public interface for the Cloud Controller adapter."""

from __future__ import annotations

from .client import CloudControllerClient
from .schema import AppSummaryResponse, InfoResponse, PagedResources, is_info_payload
from .translator import parse_application, parse_controller_info, parse_runtime_summary

__all__ = [
    "AppSummaryResponse",
    "CloudControllerClient",
    "InfoResponse",
    "PagedResources",
    "is_info_payload",
    "parse_application",
    "parse_controller_info",
    "parse_runtime_summary",
]
