import json

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QSplitter,
    QPlainTextEdit, QComboBox, QCheckBox, QPushButton, QStatusBar, QLabel
)
from PySide6.QtCore import Qt, QTimer, QSettings, QUrl
from PySide6.QtGui import QShortcut, QKeySequence
from PySide6.QtWebEngineWidgets import QWebEngineView

from core.app_settings import AppSettingsController
from core.delivery import DeliveryGateway
from core.export_settings import ImageFormat
from core.image_exporter import ImageExporter
from core.markdown_renderer import MarkdownRenderer
from core.themes import list_themes
from core.tree_cloner import LAYOUT_PROPERTIES
from core.webengine_surface import ROOT_LAYOUT_JS, WebEngineSurface
from models import CaptureTarget, PreviewDocument
from ui.export_controller import ExportController, ExportStatus
from utils import debug_overlay
from utils.logger import logger

RENDER_DEBOUNCE_MS = 250

WELCOME_MARKDOWN = """# Markdown2PNG

Write **markdown** on the left, pick a theme and export the preview as an image.

## Features

- Eight themes
- PNG, JPG and SVG export
- Saved to disk *and* copied to the clipboard

```python
print("hello")
```

> Toggle the debug overlay to inspect margins and padding.
"""


class MainWindow(QMainWindow):
    """Main application window: editor, live preview and export controls."""

    def __init__(self):
        super().__init__()

        # QSettings for persistent window state
        self.settings = QSettings("Markdown2PNG", "MainWindow")

        # Create App Settings Controller
        self.app_settings = AppSettingsController()
        logger.info("App settings controller initialized", source="MainWindow")

        self.renderer = MarkdownRenderer()
        self.document: PreviewDocument = self.renderer.render("", self.app_settings.get_theme_id())

        # Debounce re-rendering while typing
        self.render_debounce_timer = QTimer()
        self.render_debounce_timer.setSingleShot(True)
        self.render_debounce_timer.setInterval(RENDER_DEBOUNCE_MS)
        self.render_debounce_timer.timeout.connect(self._render_preview)

        # Export pipeline
        self.surface = WebEngineSurface()
        self.exporter = ImageExporter(self.surface, lambda: self.document)
        self.export_controller = ExportController(
            self.exporter,
            DeliveryGateway(),
            self.app_settings,
            parent=self
        )

        self._setup_ui()
        self._connect_signals()
        self._restore_window_state()

        self.editor.setPlainText(WELCOME_MARKDOWN)
        self._render_preview()

        self._setup_export_shortcut()

        logger.info("Markdown2PNG started successfully", source="App")

    def _setup_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("Markdown2PNG")
        self.setMinimumSize(1000, 650)
        self.resize(1300, 800)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        layout = QVBoxLayout(central_widget)
        layout.setContentsMargins(8, 8, 8, 0)
        layout.setSpacing(8)

        # Top bar - theme, format, debug toggle, export
        top_bar = QHBoxLayout()
        top_bar.setSpacing(8)

        top_bar.addWidget(QLabel("Theme:"))
        self.theme_combo = QComboBox()
        for theme in list_themes():
            self.theme_combo.addItem(theme.name, theme.id)
            self.theme_combo.setItemData(self.theme_combo.count() - 1, theme.description, Qt.ItemDataRole.ToolTipRole)
        self.theme_combo.setCurrentIndex(max(0, self.theme_combo.findData(self.app_settings.get_theme_id())))
        top_bar.addWidget(self.theme_combo)

        top_bar.addWidget(QLabel("Format:"))
        self.format_combo = QComboBox()
        for fmt in ImageFormat:
            self.format_combo.addItem(fmt.value.upper(), fmt)
        self.format_combo.setCurrentIndex(max(0, self.format_combo.findData(self.app_settings.get_export_format())))
        top_bar.addWidget(self.format_combo)

        self.debug_checkbox = QCheckBox("Debug overlay")
        top_bar.addWidget(self.debug_checkbox)

        top_bar.addStretch()

        self.export_button = QPushButton()
        self.export_button.setObjectName("exportButton")
        self.export_button.setMinimumWidth(130)
        top_bar.addWidget(self.export_button)

        layout.addLayout(top_bar)

        # Editor | Preview splitter
        self.main_splitter = QSplitter(Qt.Orientation.Horizontal)
        self.main_splitter.setChildrenCollapsible(False)

        self.editor = QPlainTextEdit()
        self.editor.setPlaceholderText("Type markdown here...")
        self.main_splitter.addWidget(self.editor)

        self.preview = QWebEngineView()
        self.main_splitter.addWidget(self.preview)
        self.main_splitter.setSizes([600, 700])

        layout.addWidget(self.main_splitter)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self._update_export_button(ExportStatus.IDLE)

    def _connect_signals(self):
        """Connect widget signals."""
        self.editor.textChanged.connect(self.render_debounce_timer.start)
        self.theme_combo.currentIndexChanged.connect(self._on_theme_changed)
        self.format_combo.currentIndexChanged.connect(self._on_format_changed)
        self.debug_checkbox.toggled.connect(self._on_debug_toggled)
        self.preview.loadFinished.connect(self._on_preview_loaded)
        self.export_button.clicked.connect(self._on_export_clicked)
        self.export_controller.status_changed.connect(self._on_export_status_changed)

    # ==========================================
    #  PREVIEW
    # ==========================================

    def _current_theme_id(self) -> str:
        return self.theme_combo.currentData()

    def _render_preview(self):
        """Rebuild the live document from the editor and show it."""
        self.document = self.renderer.render(self.editor.toPlainText(), self._current_theme_id())
        if self.debug_checkbox.isChecked():
            debug_overlay.enable_overlay(self.document)
        self.preview.setHtml(self.document.to_html(), QUrl("about:blank"))
        self.export_button.setEnabled(bool(self.editor.toPlainText().strip()))

    def _on_preview_loaded(self, ok: bool):
        """Record the live target's computed box so exports reproduce it."""
        if not ok:
            return
        document = self.document
        script = ROOT_LAYOUT_JS % (json.dumps(CaptureTarget().element_id), json.dumps(list(LAYOUT_PROPERTIES)))
        self.preview.page().runJavaScript(script, lambda result: document.set_root_layout(result))

    def _on_theme_changed(self, index: int):
        theme_id = self.theme_combo.itemData(index)
        self.app_settings.set_theme_id(theme_id)
        logger.info(f"Theme changed: {theme_id}", source="MainWindow")
        self._render_preview()

    def _on_format_changed(self, index: int):
        fmt = self.format_combo.itemData(index)
        self.app_settings.set_export_format(fmt)
        self._update_export_button(self.export_controller.status)

    def _on_debug_toggled(self, checked: bool):
        if checked:
            debug_overlay.enable_overlay(self.document)
        else:
            debug_overlay.disable_overlay(self.document)
        self.preview.setHtml(self.document.to_html(), QUrl("about:blank"))

    # ==========================================
    #  EXPORT
    # ==========================================

    def _setup_export_shortcut(self):
        """Ctrl+E exports the current preview."""
        self.export_shortcut = QShortcut(QKeySequence("Ctrl+E"), self)
        self.export_shortcut.activated.connect(self._on_export_clicked)

    def _on_export_clicked(self):
        # Pick up edits still waiting on the debounce timer
        if self.render_debounce_timer.isActive():
            self.render_debounce_timer.stop()
            self._render_preview()

        self.export_controller.request_export(self.editor.toPlainText(), self._current_theme_id())

    def _on_export_status_changed(self, status: ExportStatus, message: str):
        self._update_export_button(status)

        warnings = self.export_controller.warnings if status in (ExportStatus.SUCCESS, ExportStatus.ERROR) else []
        if warnings:
            message = f"{message} ({len(warnings)} warning{'' if len(warnings) == 1 else 's'})"
        self.status_bar.setToolTip("\n".join(warnings))

        if status == ExportStatus.SUCCESS:
            self.status_bar.setStyleSheet("color: #4CAF50;")
            self.status_bar.showMessage(f"✓ {message}")
        elif status == ExportStatus.ERROR:
            self.status_bar.setStyleSheet("color: #F44336;")
            self.status_bar.showMessage(f"✗ {message}")
        elif status == ExportStatus.EXPORTING:
            self.status_bar.setStyleSheet("")
            self.status_bar.showMessage("Exporting...")
        else:
            self.status_bar.setStyleSheet("")
            self.status_bar.clearMessage()

    def _update_export_button(self, status: ExportStatus):
        fmt = self.format_combo.currentData() or ImageFormat.PNG
        self.export_button.setText(status.button_text(fmt.value.upper()))
        self.export_button.setEnabled(
            status != ExportStatus.EXPORTING and bool(self.editor.toPlainText().strip())
        )

    # ==========================================
    #  WINDOW STATE
    # ==========================================

    def _restore_window_state(self):
        """Restore window geometry and splitter state from QSettings."""
        geometry = self.settings.value("window/geometry")
        if geometry:
            self.restoreGeometry(geometry)
            logger.info("Window geometry restored from settings", source="MainWindow")
        else:
            logger.debug("No saved window geometry found - using defaults", source="MainWindow")

        splitter_state = self.settings.value("window/splitter_state")
        if splitter_state:
            self.main_splitter.restoreState(splitter_state)

    def _save_window_state(self):
        """Save window geometry and splitter state to QSettings."""
        self.settings.setValue("window/geometry", self.saveGeometry())
        self.settings.setValue("window/splitter_state", self.main_splitter.saveState())
        logger.info("Window state saved to settings", source="MainWindow")

    def closeEvent(self, event):
        """Save window state and release the capture surface before closing."""
        self._save_window_state()
        self.surface.close()
        event.accept()
        logger.info("Application closing - window state saved", source="MainWindow")
