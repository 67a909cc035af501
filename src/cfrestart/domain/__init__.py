"""Restart orchestration domain: model, ports and services."""
