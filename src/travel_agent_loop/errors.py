from __future__ import annotations


class TravelAgentError(Exception):
    """Base class for errors raised by the travel agent."""


class ConfigurationError(TravelAgentError):
    pass


class AmadeusAuthError(TravelAgentError):
    pass


class AmadeusApiError(TravelAgentError):
    def __init__(self, message: str, *, status_code: int | None = None, detail: object = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class UnknownToolError(TravelAgentError):
    def __init__(self, tool_name: str):
        super().__init__(f'Unknown tool "{tool_name}"')
        self.tool_name = tool_name


class TurnFailedError(TravelAgentError):
    """A turn could not be completed.

    ``kind`` is one of ``model_error``, ``model_timeout`` or ``max_rounds``.
    """

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
