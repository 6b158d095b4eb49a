"""
Conversion Errors
=================

Exception hierarchy for the conversion pipeline. Every fatal conversion error
derives from ConversionError so the conversion boundary can report it as a
structured failure. Readiness degradation is not an exception: it is reported
as a warning on the result.
"""


class ConversionError(Exception):
    """Base class for fatal conversion errors."""

    pass


class ResolutionError(ConversionError):
    """Raised when document content cannot be retrieved."""

    def __init__(self, locator: str, message: str):
        super().__init__(message)
        self.locator = locator


class NotFound(ResolutionError):
    """Raised when the locator does not point to existing content."""

    pass


class NetworkError(ResolutionError):
    """Raised when remote content cannot be fetched."""

    pass


class AccessDenied(ResolutionError):
    """Raised when the caller is not permitted to read the content."""

    pass


class RuntimeLaunchError(ConversionError):
    """Raised when a browser runtime cannot be started."""

    pass


class LoadTimeout(ConversionError):
    """Raised when the assembled document does not load within the navigation timeout."""

    pass


class CaptureError(ConversionError):
    """Raised when the settled page cannot be printed to PDF."""

    pass


class OutputWriteError(ConversionError):
    """Raised when the PDF cannot be written to its output location."""

    pass
