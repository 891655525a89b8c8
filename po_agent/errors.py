"""po_agent.errors

Error types shared by the API, agent, tools and storage.

`http_status` is what the API answers when one of these escapes a route.
"""


class AppError(Exception):
    """Base application error."""

    http_status = 500


class ConfigError(AppError):
    """Missing or invalid configuration (env vars, catalog file, credentials)."""


class ToolError(AppError):
    """A kernel function could not be resolved, its arguments were wrong, or the model call behind it failed."""


class LLMOutputError(AppError):
    """Model output is not the JSON object the caller asked for."""


class SessionError(AppError):
    """Session id is missing or blank."""

    http_status = 400
