"""
Application Settings Controller

Manages persistent app settings using QSettings with signal-based notifications.
NOT a singleton - create once in MainWindow and pass to components via dependency injection.

Settings Categories:
- Export: Format, quality, scale, scaling mode, layout policy, font timeout,
  output folder and delivery toggles
- Appearance: Last selected theme
"""
from pathlib import Path

from PySide6.QtCore import QObject, Signal, QSettings
from typing import Optional, cast

from core.export_settings import (
    DEFAULT_FONT_TIMEOUT_MS, DEFAULT_SCALE, MAX_SCALE, MIN_SCALE,
    ExportOptions, ImageFormat, LayoutPolicy, ScalingMode
)
from core.themes import DEFAULT_THEME_ID, THEMES
from utils.logger import logger

MAX_FONT_TIMEOUT_MS = 30000


class SettingsKeys:
    """
    Centralized string constants for QSettings keys.

    All keys use category/setting_name format for organization.
    """

    # Export category
    EXPORT_FORMAT = "export/format"
    EXPORT_QUALITY = "export/quality"
    EXPORT_SCALE = "export/scale"
    EXPORT_SCALING_MODE = "export/scaling_mode"
    EXPORT_LAYOUT_POLICY = "export/layout_policy"
    EXPORT_FONT_TIMEOUT = "export/font_timeout_ms"
    EXPORT_OUTPUT_FOLDER = "export/output_folder"
    EXPORT_SAVE_FILE = "export/save_file"
    EXPORT_COPY_TO_CLIPBOARD = "export/copy_to_clipboard"

    # Appearance category
    APPEARANCE_THEME = "appearance/theme"


class AppSettingsController(QObject):
    """
    Controller for application settings with signal-based change notifications.

    Usage:
        # In MainWindow.__init__
        self.app_settings = AppSettingsController()

        # Listen to changes
        self.app_settings.export_changed.connect(self._on_export_settings_changed)

        # Per export
        options = self.app_settings.build_export_options()
    """

    # Signals emitted when settings in each category change
    export_changed = Signal()
    appearance_changed = Signal()

    def __init__(self, settings: Optional[QSettings] = None):
        """
        Initialize settings controller.

        Args:
            settings: Optional QSettings instance. If None, creates default
                     QSettings for "Markdown2PNG". Pass custom instance for testing.
        """
        super().__init__()
        self.settings = settings or QSettings("Markdown2PNG", "AppSettings")

    # ============================================================
    # EXPORT SETTINGS - Getters
    # ============================================================

    def get_export_format(self) -> ImageFormat:
        """
        Get export format.

        Returns:
            ImageFormat enum (default PNG)
        """
        raw = self.settings.value(SettingsKeys.EXPORT_FORMAT, ImageFormat.PNG.value)
        format_str: str = raw if isinstance(raw, str) else str(raw)
        try:
            return ImageFormat.from_string(format_str)
        except ValueError:
            logger.warning(f"Unknown stored export format '{format_str}', using PNG", source="AppSettings")
            return ImageFormat.PNG

    def get_export_quality(self) -> int:
        """
        Get export quality.

        Returns:
            Quality in percent (10-100, default 100)
        """
        value = self.settings.value(SettingsKeys.EXPORT_QUALITY, 100, type=int)
        return cast(int, value)

    def get_scaling_mode(self) -> ScalingMode:
        raw = self.settings.value(SettingsKeys.EXPORT_SCALING_MODE, ScalingMode.NATIVE.value)
        mode_str: str = raw if isinstance(raw, str) else str(raw)
        mapping: dict[str, ScalingMode] = {mode.value: mode for mode in ScalingMode}
        return mapping.get(mode_str, ScalingMode.NATIVE)

    def get_export_scale(self) -> int:
        """
        Get export scale factor.

        Returns:
            Pixel multiplier (1-4, default depends on the scaling mode)
        """
        default = DEFAULT_SCALE[self.get_scaling_mode()]
        value = self.settings.value(SettingsKeys.EXPORT_SCALE, default, type=int)
        return cast(int, value)

    def get_layout_policy(self) -> LayoutPolicy:
        raw = self.settings.value(SettingsKeys.EXPORT_LAYOUT_POLICY, LayoutPolicy.NATURAL.value)
        policy_str: str = raw if isinstance(raw, str) else str(raw)
        mapping: dict[str, LayoutPolicy] = {policy.value: policy for policy in LayoutPolicy}
        return mapping.get(policy_str, LayoutPolicy.NATURAL)

    def get_font_timeout_ms(self) -> int:
        value = self.settings.value(SettingsKeys.EXPORT_FONT_TIMEOUT, DEFAULT_FONT_TIMEOUT_MS, type=int)
        return cast(int, value)

    def get_output_folder(self) -> Path:
        # Default to ~/Pictures/Markdown2PNG
        default_path = Path.home() / "Pictures" / "Markdown2PNG"
        raw = self.settings.value(SettingsKeys.EXPORT_OUTPUT_FOLDER, str(default_path))
        path_str: str = raw if isinstance(raw, str) else str(raw)
        return Path(path_str)

    def get_save_file(self) -> bool:
        return bool(self.settings.value(SettingsKeys.EXPORT_SAVE_FILE, True, type=bool))

    def get_copy_to_clipboard(self) -> bool:
        return bool(self.settings.value(SettingsKeys.EXPORT_COPY_TO_CLIPBOARD, True, type=bool))

    # ============================================================
    # APPEARANCE SETTINGS - Getters
    # ============================================================

    def get_theme_id(self) -> str:
        """
        Get the last selected theme.

        Returns:
            Theme id (falls back to the default theme if unknown)
        """
        raw = self.settings.value(SettingsKeys.APPEARANCE_THEME, DEFAULT_THEME_ID)
        theme_id: str = raw if isinstance(raw, str) else str(raw)
        return theme_id if theme_id in THEMES else DEFAULT_THEME_ID

    # ============================================================
    # EXPORT SETTINGS - Setters
    # ============================================================

    def set_export_format(self, value: ImageFormat) -> None:
        """
        Set export format.

        Raises:
            ValueError: If value is not an ImageFormat
        """
        if not isinstance(value, ImageFormat):
            raise ValueError("export_format must be an ImageFormat enum")

        self.settings.setValue(SettingsKeys.EXPORT_FORMAT, value.value)
        self.export_changed.emit()

    def set_export_quality(self, value: int) -> None:
        """
        Set export quality.

        Args:
            value: Quality in percent (10-100)

        Raises:
            ValueError: If value is outside valid range
        """
        if not isinstance(value, int):
            raise ValueError("export_quality must be an integer")

        if not 10 <= value <= 100:
            raise ValueError("export_quality must be between 10 and 100")

        self.settings.setValue(SettingsKeys.EXPORT_QUALITY, value)
        self.export_changed.emit()

    def set_export_scale(self, value: int) -> None:
        """
        Set export scale factor.

        Args:
            value: Pixel multiplier (1-4)

        Raises:
            ValueError: If value is outside valid range
        """
        if not isinstance(value, int):
            raise ValueError("export_scale must be an integer")

        if not MIN_SCALE <= value <= MAX_SCALE:
            raise ValueError(f"export_scale must be between {MIN_SCALE} and {MAX_SCALE}")

        self.settings.setValue(SettingsKeys.EXPORT_SCALE, value)
        self.export_changed.emit()

    def set_scaling_mode(self, value: ScalingMode) -> None:
        if not isinstance(value, ScalingMode):
            raise ValueError("scaling_mode must be a ScalingMode enum")
        self.settings.setValue(SettingsKeys.EXPORT_SCALING_MODE, value.value)
        self.export_changed.emit()

    def set_layout_policy(self, value: LayoutPolicy) -> None:
        if not isinstance(value, LayoutPolicy):
            raise ValueError("layout_policy must be a LayoutPolicy enum")
        self.settings.setValue(SettingsKeys.EXPORT_LAYOUT_POLICY, value.value)
        self.export_changed.emit()

    def set_font_timeout_ms(self, value: int) -> None:
        """
        Set font-readiness timeout.

        Args:
            value: Timeout in milliseconds (0-30000)

        Raises:
            ValueError: If value is outside valid range
        """
        if not isinstance(value, int):
            raise ValueError("font_timeout_ms must be an integer")

        if not 0 <= value <= MAX_FONT_TIMEOUT_MS:
            raise ValueError(f"font_timeout_ms must be between 0 and {MAX_FONT_TIMEOUT_MS}")

        self.settings.setValue(SettingsKeys.EXPORT_FONT_TIMEOUT, value)
        self.export_changed.emit()

    def set_output_folder(self, path: Path) -> None:
        if not isinstance(path, Path):
            raise ValueError("output_folder must be a Path")
        self.settings.setValue(SettingsKeys.EXPORT_OUTPUT_FOLDER, str(path))
        self.export_changed.emit()

    def set_save_file(self, enabled: bool) -> None:
        if not isinstance(enabled, bool):
            raise ValueError("save_file must be a bool")
        self.settings.setValue(SettingsKeys.EXPORT_SAVE_FILE, enabled)
        self.export_changed.emit()

    def set_copy_to_clipboard(self, enabled: bool) -> None:
        if not isinstance(enabled, bool):
            raise ValueError("copy_to_clipboard must be a bool")
        self.settings.setValue(SettingsKeys.EXPORT_COPY_TO_CLIPBOARD, enabled)
        self.export_changed.emit()

    # ============================================================
    # APPEARANCE SETTINGS - Setters
    # ============================================================

    def set_theme_id(self, theme_id: str) -> None:
        """
        Remember the selected theme.

        Raises:
            ValueError: If the theme id is unknown
        """
        if theme_id not in THEMES:
            raise ValueError(f"Unknown theme: {theme_id!r}")

        self.settings.setValue(SettingsKeys.APPEARANCE_THEME, theme_id)
        self.appearance_changed.emit()

    # ============================================================
    # UTILITY METHODS
    # ============================================================

    def build_export_options(self) -> ExportOptions:
        """Assemble ExportOptions from the stored export settings."""
        return ExportOptions(
            format=self.get_export_format(),
            quality=self.get_export_quality() / 100,
            scale=self.get_export_scale(),
            scaling_mode=self.get_scaling_mode(),
            layout_policy=self.get_layout_policy(),
            font_timeout_ms=self.get_font_timeout_ms()
        )

    def reset_to_defaults(self) -> None:
        """
        Clear all settings and revert to defaults.

        Emits all change signals to notify components.
        """
        self.settings.clear()
        logger.info("Settings reset to defaults", source="AppSettings")

        self.export_changed.emit()
        self.appearance_changed.emit()

    def get_all_settings(self) -> dict:
        """
        Get all current settings as a dictionary.

        Useful for debugging or displaying current configuration.
        """
        return {
            'export_format': self.get_export_format().value,
            'export_quality': self.get_export_quality(),
            'export_scale': self.get_export_scale(),
            'scaling_mode': self.get_scaling_mode().value,
            'layout_policy': self.get_layout_policy().value,
            'font_timeout_ms': self.get_font_timeout_ms(),
            'output_folder': str(self.get_output_folder()),
            'save_file': self.get_save_file(),
            'copy_to_clipboard': self.get_copy_to_clipboard(),
            'theme': self.get_theme_id()
        }

    def __repr__(self) -> str:
        """String representation showing all current settings."""
        settings = self.get_all_settings()
        settings_str = "\n  ".join(f"{k}: {v}" for k, v in settings.items())
        return f"AppSettingsController(\n  {settings_str}\n)"
