"""Custom exceptions for PageQuill."""

from typing import Optional


class PageQuillError(Exception):
    """Base exception for PageQuill errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(PageQuillError):
    """Exception raised for invalid pagination options."""

    pass


class GeometryError(PageQuillError):
    """Exception raised during page geometry calculations."""

    pass


class CaptureError(PageQuillError):
    """Base exception for rasterization problems."""

    pass


class CaptureTargetMissing(CaptureError):
    """Raised when the content element is not found or not attached."""

    pass


class CaptureFailure(CaptureError):
    """Raised for any other failure while capturing the content tree."""

    pass


class TypesettingTimeout(PageQuillError):
    """
    Fonts or typesetting did not settle in time.

    Non-fatal: the readiness barrier logs it and the pipeline proceeds
    with a best-effort capture.
    """

    def __init__(self, timeout: float, details: Optional[str] = None):
        super().__init__(f"Typesetting did not settle within {timeout:.1f}s", details)
        self.timeout = timeout


class RemoteRenderFailure(PageQuillError):
    """Raised when the remote rendering service does not return a PDF."""

    def __init__(self, status_code: Optional[int], body: str = "", details: Optional[str] = None):
        if status_code is None:
            message = "PDF generation service request failed"
        else:
            message = f"PDF generation service failed with status {status_code}"
        super().__init__(message, details or body or None)
        self.status_code = status_code
        self.body = body


class DocumentGenerationError(PageQuillError):
    """
    User-facing error raised at the job boundary.

    Wraps whichever fatal error aborted the job; no partial document is
    produced when this is raised.
    """

    USER_MESSAGE = "Could not generate document"

    def __init__(self, cause: Optional[BaseException] = None, filename: Optional[str] = None):
        super().__init__(self.USER_MESSAGE, str(cause) if cause else None)
        self.cause = cause
        self.filename = filename
