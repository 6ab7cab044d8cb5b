"""Shared utilities."""

from gitstate.utils._logging import LogFormatType, create_logger

__all__ = ["LogFormatType", "create_logger"]
