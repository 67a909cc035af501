"""Domain port definitions for adapters."""

from __future__ import annotations

from .controller import ControllerApi
from .logstream import LogObserver, LogStreamClient, LogStreamFactory, LogSubscription

__all__ = [
    "ControllerApi",
    "LogObserver",
    "LogStreamClient",
    "LogStreamFactory",
    "LogSubscription",
]
