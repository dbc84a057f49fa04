"""Convenience exports for typescope telemetry utilities."""

from . import logger
from .logger import configure, get_logger

__all__ = ["configure", "get_logger", "logger"]
