# MainWindow is imported from ui.main_window directly: QtWebEngine must load
# before the QApplication exists.
from .export_controller import ExportController, ExportStatus

__all__ = ['ExportController', 'ExportStatus']
