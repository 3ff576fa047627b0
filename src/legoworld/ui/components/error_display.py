"""
Streamlit error display components.

Errors are classified by ``handle_error`` and shown with a severity-matched
alert; technical details stay behind an expander.
"""

from typing import Any

import streamlit as st
from streamlit.runtime.scriptrunner_utils.exceptions import RerunException, StopException

from ...logging_config import get_logger
from ..handlers.error import ErrorInfo, ErrorSeverity, handle_error

# Type alias for Streamlit container
StreamlitContainer = Any

logger = get_logger(__name__)


class ErrorDisplayManager:
    """Manager for displaying errors in Streamlit interface."""

    def __init__(self) -> None:
        self.logger = get_logger(__name__)

    def display_error(
        self,
        error_info: ErrorInfo,
        container: StreamlitContainer | None = None,
        show_details: bool = False,
    ) -> None:
        """
        Display error information in Streamlit interface.

        Args:
            error_info: Structured error information
            container: Streamlit container to display in (optional)
            show_details: Whether to show technical details
        """
        alert_type = self._get_alert_type(error_info.severity)

        def _display_content() -> None:
            if alert_type == "error":
                st.error(error_info.user_message)
            elif alert_type == "warning":
                st.warning(error_info.user_message)
            else:
                st.info(error_info.user_message)

            if show_details:
                with st.expander("Details", expanded=False):
                    st.write("**Error code:**", error_info.code)
                    st.write("**Category:**", error_info.category.value)
                    st.write("**Message:**", error_info.message)
                    for key, value in error_info.details.items():
                        st.write(f"- {key}: {value}")

        if container is not None:
            with container:
                _display_content()
        else:
            _display_content()

        self.logger.info(
            "error_displayed_to_user",
            error_code=error_info.code,
            category=error_info.category.value,
            severity=error_info.severity.value,
        )

    def display_exception(
        self,
        exception: Exception,
        context: dict[str, Any] | None = None,
        container: StreamlitContainer | None = None,
        show_details: bool = False,
    ) -> None:
        """Classify an exception and display it."""
        error_info = handle_error(exception, context)
        self.display_error(error_info=error_info, container=container, show_details=show_details)

    def display_warning_message(self, message: str, container: StreamlitContainer | None = None) -> None:
        display_container = container if container is not None else st

        with display_container:  # type: ignore
            st.warning(message)

    def _get_alert_type(self, severity: ErrorSeverity) -> str:
        """Get appropriate Streamlit alert type for error severity."""
        severity_mapping = {
            ErrorSeverity.LOW: "info",
            ErrorSeverity.MEDIUM: "warning",
            ErrorSeverity.HIGH: "error",
            ErrorSeverity.CRITICAL: "error",
        }
        return severity_mapping.get(severity, "error")


error_display_manager = ErrorDisplayManager()


def get_error_display_manager() -> ErrorDisplayManager:
    """Get the global error display manager instance."""
    return error_display_manager


class StreamlitErrorContext:
    """Context manager that displays, rather than raises, errors from a Streamlit block."""

    def __init__(
        self,
        error_message: str = "Something went wrong",
        show_details: bool = False,
        container: StreamlitContainer | None = None,
    ):
        self.error_message = error_message
        self.show_details = show_details
        self.container = container

    def __enter__(self) -> "StreamlitErrorContext":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if exc_type is None:
            return False

        # Rerun and stop are Streamlit control flow, not errors
        if isinstance(exc_val, RerunException | StopException):
            return False

        if not isinstance(exc_val, Exception):
            return False

        logger.error("streamlit_block_failed", message=self.error_message, error=str(exc_val))
        error_display_manager.display_exception(
            exception=exc_val,
            context={"operation": self.error_message},
            container=self.container,
            show_details=self.show_details,
        )
        return True


def error_context(
    error_message: str = "Something went wrong",
    show_details: bool = False,
    container: StreamlitContainer | None = None,
) -> StreamlitErrorContext:
    """Create an error context manager for Streamlit operations."""
    return StreamlitErrorContext(error_message, show_details, container)
