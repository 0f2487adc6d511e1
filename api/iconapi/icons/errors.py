from __future__ import annotations


class IconError(Exception):
    """Base for every failure the icon pipeline surfaces to callers."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(IconError):
    status_code = 400


class NotFoundError(IconError):
    status_code = 404


class UpstreamError(IconError):
    status_code = 503

    def __init__(self, message: str, *, upstream_status: int | None = None, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code)
        self.upstream_status = upstream_status


class ConfigurationError(UpstreamError):
    """A collaborator the pipeline depends on is not configured."""

    status_code = 500


class FormatError(IconError):
    status_code = 500
