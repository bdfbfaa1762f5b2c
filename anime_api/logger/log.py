"""This module provides classes for custom logging with Loguru."""

from typing import Any

CORRELATION_ID_KEY = "correlation_id"


class DevelopFormatter:
    """Loguru formatter that renders records on one line for local runs and containers."""

    def __init__(self, component_name: str) -> None:
        """Initialize the formatter.

        Args:
            component_name (str): The name of the component associated with the logger.
        """
        self.component_name = component_name

    @staticmethod
    def format_correlation_id(record: dict[str, Any]) -> str:
        """Format the request correlation id, if one is bound.

        Args:
            record (dict): Log record dictionary.

        Returns:
            str: ``[<id>] `` or an empty string.
        """
        correlation_id = record.get("extra", {}).get(CORRELATION_ID_KEY)
        return f"<magenta>[{correlation_id}]</> " if correlation_id else ""

    @staticmethod
    def format_extra(record: dict[str, Any]) -> str:
        """Format the remaining extra fields of the log record.

        Args:
            record (dict): Log record dictionary.

        Returns:
            str: Space separated ``key=value`` pairs.
        """
        extra_items = record.get("extra", {}).items()
        formatted_items = (
            f"<lvl>{key}={extra_value}</>" for key, extra_value in extra_items if key != CORRELATION_ID_KEY
        )
        return " ".join(formatted_items)

    @staticmethod
    def format_exception(record: dict[str, Any]) -> str:
        """Format the exception part of the log record.

        Args:
            record (Dict[str, Any]): Log record dictionary.

        Returns:
            str: Placeholder for the traceback, or a bare newline.
        """
        return "\n{exception}\n" if record.get("exception") else "\n"

    def __call__(self, record: dict[str, Any]) -> str:
        """Build the format string for one record.

        Args:
            record (Dict[str, Any]): Log record dictionary.

        Returns:
            str: Loguru format string.
        """
        correlation_id = self.format_correlation_id(record)
        extra = self.format_extra(record)
        exception = self.format_exception(record)
        return (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</> | <lvl>{level: <8}</> | "
            f"<cyan>{self.component_name}</> | {correlation_id}"
            "<cyan>{name}</>:<cyan>{function}</>:<cyan>{line}</> "
            "- <lvl>{message}</>"
            f"{' - ' + extra if extra else ''}{exception}"
        )
