"""Logging configuration and helpers for the pledge domain."""

from .config import configure_logging, get_logger, get_engine_logger

__all__ = ["configure_logging", "get_logger", "get_engine_logger"]
