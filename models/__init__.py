from .capture_target import CaptureTarget, PREVIEW_CONTENT_ID
from .export_result import DeliveryReport, ExportErrorKind, ExportFailure, ExportResult, ExportSuccess
from .preview_document import PreviewDocument
from .theme import Theme, ThemeColors, Typography

__all__ = [
    'CaptureTarget', 'PREVIEW_CONTENT_ID',
    'DeliveryReport', 'ExportErrorKind', 'ExportFailure', 'ExportResult', 'ExportSuccess',
    'PreviewDocument',
    'Theme', 'ThemeColors', 'Typography',
]
