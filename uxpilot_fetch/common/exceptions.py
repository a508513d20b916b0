"""Exception types for design fetch errors.

Every failure the fetch pipeline can detect is raised as a subclass of
UXPilotException so the CLI can report it and exit with status 1.
"""

from typing import Any


class UXPilotException(Exception):
    """Base class for errors raised while fetching a design.

    Carries a human-readable message and an optional context dict that
    is rendered below the message to help diagnose the failure.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            context: Optional dict of additional context (url, selector, etc).
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class InvalidDesignURLException(UXPilotException):
    """Raised when the given URL is not a UXPilot design URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__("Invalid UXPilot design URL", {"url": url})


class MissingSrcdocException(UXPilotException):
    """Raised when the preview iframe carries no srcdoc attribute.

    Attributes:
        url: The design URL that was loaded.
        selector: The CSS selector used to locate the iframe.
    """

    def __init__(self, url: str, selector: str) -> None:
        self.url = url
        self.selector = selector
        super().__init__(
            "No srcdoc attribute found on iframe",
            {"url": url, "selector": selector},
        )


class BrowserTimeoutException(UXPilotException):
    """Raised when navigation or the iframe wait times out.

    Attributes:
        url: The design URL that was loaded.
        selector: The CSS selector being waited for.
        timeout: The timeout in milliseconds.
    """

    def __init__(self, url: str, selector: str, timeout: float) -> None:
        self.url = url
        self.selector = selector
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout:g}ms waiting for '{selector}'",
            {"url": url, "selector": selector, "timeout_ms": timeout},
        )


class StyleComputationException(UXPilotException):
    """Raised when the external style library cannot be loaded or fails."""


class ConfigurationException(UXPilotException):
    """Raised when a configuration file is missing or invalid."""


class NavigationException(UXPilotException):
    """Raised when the browser cannot load the design page.

    Attributes:
        url: The design URL that was requested.
        reason: The browser's error message.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(
            "Failed to load design page", {"url": url, "reason": reason}
        )
