from .errors import ExportError, TargetNotFound, CaptureError, EncodingError
from .export_settings import ExportOptions, ImageFormat, LayoutPolicy, ScalingMode
from .image_exporter import ImageExporter
from .delivery import DeliveryGateway
from .app_settings import SettingsKeys, AppSettingsController

__all__ = [
    'ExportError', 'TargetNotFound', 'CaptureError', 'EncodingError',
    'ExportOptions', 'ImageFormat', 'LayoutPolicy', 'ScalingMode',
    'ImageExporter', 'DeliveryGateway',
    'SettingsKeys', 'AppSettingsController',
]
