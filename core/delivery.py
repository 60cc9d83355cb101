"""
Delivery Gateway

Hands an encoded export to its sinks: a file in the output folder and the
system clipboard. Sinks run independently; a failing sink is reported in the
DeliveryReport and never raised.
"""

from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from PySide6.QtGui import QClipboard, QGuiApplication, QImage

from core.output_encoder import EncodedImage
from models.export_result import DeliveryReport, ExportSuccess
from utils.logger import logger

ClipboardProvider = Callable[[], Optional[QClipboard]]
Deliverable = Union[EncodedImage, ExportSuccess]


def system_clipboard() -> Optional[QClipboard]:
    """The application clipboard, or None without a GUI application."""
    if QGuiApplication.instance() is None:
        return None
    return QGuiApplication.clipboard()


class DeliveryGateway:
    """Saves and copies encoded exports."""

    def __init__(self, clipboard_provider: ClipboardProvider = system_clipboard):
        self.clipboard_provider = clipboard_provider

    def save(self, encoded: Deliverable, folder: Path) -> bool:
        """Write the payload to ``folder/file_name``. Never raises."""
        return self._write_file(encoded, folder) is not None

    def copy_to_clipboard(self, encoded: Deliverable) -> bool:
        """Copy the image (or its data URL as text). Never raises."""
        copied, _ = self._copy(encoded)
        return copied

    def deliver(
            self,
            encoded: Deliverable,
            save: bool = True,
            clipboard: bool = True,
            folder: Optional[Path] = None
    ) -> DeliveryReport:
        """Run the requested sinks independently and report each outcome."""
        saved = None
        saved_path = None
        if save:
            if folder is None:
                logger.error("No output folder configured", source="Delivery")
                saved = False
            else:
                saved_path = self._write_file(encoded, folder)
                saved = saved_path is not None

        copied = None
        copied_as_text = False
        if clipboard:
            copied, copied_as_text = self._copy(encoded)

        report = DeliveryReport(
            saved=saved,
            copied=copied,
            saved_path=saved_path,
            copied_as_text=copied_as_text
        )
        if not report.all_succeeded:
            logger.warning(report.status_message, source="Delivery")
        return report

    @staticmethod
    def _write_file(encoded: Deliverable, folder: Path) -> Optional[Path]:
        try:
            folder = Path(folder).expanduser()
            folder.mkdir(parents=True, exist_ok=True)
            path = folder / encoded.file_name
            path.write_bytes(encoded.payload)
        except OSError as e:
            logger.error(f"Failed to save {encoded.file_name}: {e}", source="Delivery")
            return None

        logger.success(f"Saved {path} ({encoded.size_kb:.1f}KB)", source="Delivery")
        return path

    def _copy(self, encoded: Deliverable) -> Tuple[bool, bool]:
        """
        Clipboard write with text fallback.

        Returns:
            (copied, copied_as_text)
        """
        clipboard = self.clipboard_provider()
        if clipboard is None:
            logger.warning("Clipboard unavailable", source="Delivery")
            return False, False

        image = QImage.fromData(encoded.payload)
        if image.isNull():
            logger.warning(
                f"Clipboard cannot take {encoded.mime_type} as an image, copying data URL instead",
                source="Delivery"
            )
        else:
            try:
                clipboard.setImage(image)
                logger.debug("Image copied to clipboard", source="Delivery")
                return True, False
            except RuntimeError as e:
                logger.warning(f"Clipboard image write failed: {e}, copying data URL instead", source="Delivery")

        try:
            clipboard.setText(encoded.data_url)
        except RuntimeError as e:
            logger.error(f"Clipboard write failed: {e}", source="Delivery")
            return False, False

        logger.debug("Data URL copied to clipboard", source="Delivery")
        return True, True
