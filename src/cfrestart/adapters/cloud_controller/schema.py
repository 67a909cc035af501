"""Pydantic models describing the Cloud Controller v2 API payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class CloudControllerBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class InfoResponse(CloudControllerBaseModel):
    name: str | None = None
    api_version: str | None = None
    doppler_logging_endpoint: str | None = None
    logging_endpoint: str | None = None

    _normalize_endpoints = field_validator(
        "doppler_logging_endpoint", "logging_endpoint", mode="before"
    )(_blank_to_none)


class ResourceMetadata(CloudControllerBaseModel):
    guid: str
    url: str | None = None


class NamedEntity(CloudControllerBaseModel):
    name: str


class Resource(CloudControllerBaseModel):
    metadata: ResourceMetadata
    entity: NamedEntity


class PagedResources(CloudControllerBaseModel):
    total_results: int = 0
    total_pages: int = 1
    resources: list[Resource]

    def first(self) -> Resource | None:
        return self.resources[0] if self.resources else None


class AppSummaryResponse(CloudControllerBaseModel):
    guid: str
    name: str
    state: str | None = None
    running_instances: int = 0
    instances: int | None = None
    package_state: str | None = None
    staging_failed_reason: str | None = None

    @field_validator("running_instances", mode="before")
    @classmethod
    def _null_to_zero(cls, value: object) -> object:
        return 0 if value is None else value


class ErrorResponse(CloudControllerBaseModel):
    code: int | None = None
    description: str
    error_code: str | None = None


def is_info_payload(payload: object) -> bool:
    """Cache predicate: only ``/v2/info`` documents are worth caching."""

    if not isinstance(payload, Mapping):
        return False
    mapping = cast(Mapping[str, object], payload)
    return "api_version" in mapping and (
        "doppler_logging_endpoint" in mapping or "logging_endpoint" in mapping
    )
