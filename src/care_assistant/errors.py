"""Error types raised below the orchestrator boundary."""

from __future__ import annotations


class CareAssistantError(Exception):
    """Base class for care assistant errors."""


class ProviderDisabledError(CareAssistantError):
    """Raised when a disabled provider is asked to answer."""


class RemoteCallError(CareAssistantError):
    """Raised when a call to the remote model endpoint fails."""


class MalformedRemoteResponseError(RemoteCallError):
    """Raised when a remote payload lacks the fields the protocol needs."""


class UnsupportedToolError(CareAssistantError):
    """Raised when a tool name is not in the supported set."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Function not implemented: {name}")


class ToolExecutionError(CareAssistantError):
    """Raised when resolving arguments or querying data for a tool fails."""
