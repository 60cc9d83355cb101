"""Exceptions raised inside the export pipeline.

They never cross ``ImageExporter.export``; the exporter turns them into an
``ExportFailure`` carrying the matching ``ExportErrorKind``.
"""

from typing import Optional

from models.export_result import ExportErrorKind


class ExportError(Exception):
    """Base class for fatal export errors."""
    kind = ExportErrorKind.UNEXPECTED


class TargetNotFound(ExportError):
    """The capture target id is not present in the preview document."""
    kind = ExportErrorKind.TARGET_NOT_FOUND

    def __init__(self, element_id: str):
        super().__init__(f"Capture target '#{element_id}' not found")
        self.element_id = element_id


class CaptureError(ExportError):
    """The rasterization primitive failed or produced an unusable buffer."""
    kind = ExportErrorKind.CAPTURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class EncodingError(ExportError):
    """The final buffer could not be serialized to an image payload."""
    kind = ExportErrorKind.ENCODING
