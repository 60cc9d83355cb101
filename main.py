import sys

# QtWebEngine has to be imported before the QApplication is created
from PySide6.QtWebEngineWidgets import QWebEngineView  # noqa: F401
from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont

from ui.main_window import MainWindow
from utils.logger import logger


def configure_font(app: QApplication) -> None:
    """Anti-aliased UI font."""
    font = app.font()
    font.setStyleStrategy(
        QFont.StyleStrategy.PreferAntialias |
        QFont.StyleStrategy.PreferQuality
    )
    font.setHintingPreference(QFont.HintingPreference.PreferNoHinting)
    app.setFont(font)


def main():
    # Enable high DPI scaling
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Markdown2PNG")
    app.setOrganizationName("Markdown2PNG")

    configure_font(app)

    # Create and show main window
    window = MainWindow()
    window.show()

    exit_code = app.exec()
    logger.info(f"Event loop finished (exit code {exit_code})", source="App")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
