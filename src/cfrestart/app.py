"""Application orchestration entry points."""

from __future__ import annotations

import threading
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from cfrestart.adapters.cloud_controller import CloudControllerClient, is_info_payload
from cfrestart.adapters.logstream import build_log_stream_client
from cfrestart.config import (
    ConfigurationError,
    RestartConfig,
    get_cloud_controller_config,
)
from cfrestart.domain.errors import CloudFoundryError, StagingFailedError
from cfrestart.domain.forwarding import LoggingObserver
from cfrestart.domain.model import MonitorOutcome, RestartResult
from cfrestart.domain.restart import RestartOrchestrator

if TYPE_CHECKING:
    from cfrestart.config import CloudControllerConfig
    from cfrestart.domain.model import RestartTarget
    from cfrestart.domain.ports.controller import ControllerApi
    from cfrestart.domain.ports.logstream import LogObserver, LogStreamFactory
    from cfrestart.domain.restart import Cancellation


log = getLogger(__name__)


def _default_stream_factory(config: CloudControllerConfig) -> LogStreamFactory:
    return partial(
        build_log_stream_client,
        authorization=config.authorization,
        skip_ssl_validation=config.skip_ssl_validation,
    )


def restart_application(
    target: RestartTarget,
    *,
    controller: ControllerApi | None = None,
    stream_factory: LogStreamFactory | None = None,
    observer: LogObserver | None = None,
    cancellation: Cancellation | None = None,
    restart_config: RestartConfig | None = None,
    skip_ssl_validation: bool | None = None,
) -> RestartResult:
    """Restart ``target`` and watch it come online, reporting a single result.

    Every failure is logged here and converted into the returned result.
    """

    settings = restart_config or RestartConfig()
    try:
        if controller is None or stream_factory is None:
            config = get_cloud_controller_config(
                skip_ssl_validation=skip_ssl_validation,
                cache_predicate=is_info_payload,
            )
            controller = controller or CloudControllerClient(config=config)
            stream_factory = stream_factory or _default_stream_factory(config)

        orchestrator = RestartOrchestrator(
            controller=controller,
            stream_factory=stream_factory,
            observer=observer or LoggingObserver(),
            poll_interval_seconds=settings.poll_interval_seconds,
            stream_close_timeout_seconds=settings.stream_close_timeout_seconds,
            cancellation=cancellation if cancellation is not None else threading.Event(),
        )

        outcome = orchestrator.run(target)
    except StagingFailedError as exc:
        log.error("Restart App failed: %s", exc)
        return RestartResult(outcome=MonitorOutcome.STAGING_FAILED, error=exc)
    except (CloudFoundryError, ConfigurationError) as exc:
        log.error("Restart App failed: %s", exc, exc_info=exc.__cause__ is not None)
        return RestartResult(outcome=None, error=exc)
    except Exception as exc:
        log.exception("Restart App failed")
        return RestartResult(outcome=None, error=exc)

    if outcome is MonitorOutcome.RUNNING:
        log.info("Application %s restarted", target.application)
    return RestartResult(outcome=outcome)
