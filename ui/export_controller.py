"""
Export Controller

Bridges the export button and the export pipeline: rejects re-entrant
triggers, runs the export, hands the result to delivery and exposes a
tri-state status that falls back to idle on its own. Warnings the pipeline
logs during a request are kept for the status bar.
"""

from dataclasses import replace
from enum import Enum
from typing import List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from core.app_settings import AppSettingsController
from core.delivery import DeliveryGateway
from core.image_exporter import ImageExporter
from models.capture_target import CaptureTarget
from models.export_result import ExportFailure, ExportResult
from utils.logger import LogLevel, LogMessage, logger

STATUS_RESET_MS = 3000
NOTHING_TO_EXPORT = "Nothing to export"


class ExportStatus(Enum):
    """Export button state."""
    IDLE = "idle"
    EXPORTING = "exporting"
    SUCCESS = "success"
    ERROR = "error"

    def button_text(self, format_label: str = "PNG") -> str:
        texts = {
            ExportStatus.EXPORTING: "Exporting...",
            ExportStatus.SUCCESS: "Exported!",
            ExportStatus.ERROR: "Export Failed",
        }
        return texts.get(self, f"Export {format_label}")


class ExportController(QObject):
    """
    Owns the export status and the single-flight guard.

    Signals:
        status_changed(ExportStatus, str): New status and a short message
        export_finished(object): ExportResult of a completed request
    """

    status_changed = Signal(object, str)
    export_finished = Signal(object)

    def __init__(
            self,
            exporter: ImageExporter,
            delivery: DeliveryGateway,
            settings: AppSettingsController,
            target: CaptureTarget = CaptureTarget(),
            reset_ms: int = STATUS_RESET_MS,
            parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.exporter = exporter
        self.delivery = delivery
        self.settings = settings
        self.target = target

        self._status = ExportStatus.IDLE
        self._message = ""
        self._is_exporting = False
        self._warnings: List[str] = []

        self._reset_timer = QTimer(self)
        self._reset_timer.setSingleShot(True)
        self._reset_timer.setInterval(reset_ms)
        self._reset_timer.timeout.connect(self._reset_status)

    @property
    def status(self) -> ExportStatus:
        return self._status

    @property
    def message(self) -> str:
        return self._message

    @property
    def is_exporting(self) -> bool:
        return self._is_exporting

    @property
    def warnings(self) -> List[str]:
        """Warnings logged by the pipeline during the last request."""
        return list(self._warnings)

    def request_export(self, markdown_text: str, theme_id: Optional[str] = None) -> Optional[ExportResult]:
        """
        Run one export for the current preview.

        Args:
            markdown_text: Editor contents (empty → "Nothing to export")
            theme_id: Theme to export with (None = last selected theme)

        Returns:
            ExportResult, or None if an export was already in flight
        """
        if self._is_exporting:
            logger.warning("Export already in progress, ignoring trigger", source="ExportController")
            return None

        if not (markdown_text or "").strip():
            self._warnings = []
            self._set_status(ExportStatus.ERROR, NOTHING_TO_EXPORT)
            self._schedule_reset()
            return ExportFailure(error_message=NOTHING_TO_EXPORT)

        self._is_exporting = True
        self._warnings = []
        self._reset_timer.stop()
        logger.add_callback(self._collect_warning)
        self._set_status(ExportStatus.EXPORTING, "")

        try:
            theme_id = theme_id or self.settings.get_theme_id()
            options = self.settings.build_export_options()
            result = self.exporter.export(self.target, theme_id, options)

            if result.success:
                report = self.delivery.deliver(
                    result,
                    save=self.settings.get_save_file(),
                    clipboard=self.settings.get_copy_to_clipboard(),
                    folder=self.settings.get_output_folder()
                )
                result = replace(result, delivery=report)
                self._set_status(ExportStatus.SUCCESS, report.status_message)
            else:
                self._set_status(ExportStatus.ERROR, result.error_message)
        finally:
            logger.remove_callback(self._collect_warning)
            self._is_exporting = False
            self._schedule_reset()

        self.export_finished.emit(result)
        return result

    def _collect_warning(self, message: LogMessage) -> None:
        if message.level == LogLevel.WARNING and message.source != "ExportController":
            self._warnings.append(message.message)

    def _set_status(self, status: ExportStatus, message: str) -> None:
        self._status = status
        self._message = message
        logger.debug(f"Status: {status.value}{f' ({message})' if message else ''}", source="ExportController")
        self.status_changed.emit(status, message)

    def _schedule_reset(self) -> None:
        self._reset_timer.start()

    def _reset_status(self) -> None:
        if self._is_exporting:
            return
        self._set_status(ExportStatus.IDLE, "")
