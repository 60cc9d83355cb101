"""
Export result types.

An export either succeeds with an encoded payload or fails with a message;
the two shapes never mix. Delivery (save / clipboard) outcomes ride along on
a success as a softer status and never turn it into a failure.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class ExportErrorKind(Enum):
    """Why an export failed."""
    TARGET_NOT_FOUND = "target_not_found"
    CAPTURE = "capture"
    ENCODING = "encoding"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class DeliveryReport:
    """Outcome of the save and clipboard sinks. None = sink not requested."""
    saved: Optional[bool] = None
    copied: Optional[bool] = None
    saved_path: Optional[Path] = None
    copied_as_text: bool = False

    @property
    def all_succeeded(self) -> bool:
        """True when every requested sink succeeded."""
        return self.saved is not False and self.copied is not False

    @property
    def status_message(self) -> str:
        """Short status text for the UI."""
        if self.saved is None and self.copied is None:
            return "Image exported"

        if self.saved and self.copied:
            if self.copied_as_text:
                return "Image saved & copied to clipboard as data URL"
            return "Image saved & copied to clipboard"
        if self.saved and self.copied is False:
            return "Saved but clipboard failed"
        if self.saved:
            return "Image saved"

        if self.saved is False and self.copied:
            return "Copied to clipboard but save failed"
        if self.saved is False:
            if self.copied is False:
                return "Save and clipboard both failed"
            return "Save failed"

        # Clipboard only
        if self.copied and self.copied_as_text:
            return "Copied to clipboard as data URL"
        if self.copied:
            return "Image copied to clipboard"
        return "Clipboard failed"


@dataclass(frozen=True)
class ExportSuccess:
    """Encoded image ready for delivery."""
    data_url: str
    file_name: str
    mime_type: str
    payload: bytes = field(repr=False)
    width: int
    height: int
    debug_active: bool = False
    delivery: Optional[DeliveryReport] = None

    success = True

    @property
    def size_kb(self) -> float:
        """Encoded payload size in kilobytes."""
        return len(self.payload) / 1024


@dataclass(frozen=True)
class ExportFailure:
    """Export aborted; error_message is never empty."""
    error_message: str
    error_kind: ExportErrorKind = ExportErrorKind.UNEXPECTED

    success = False

    def __post_init__(self):
        if not self.error_message:
            object.__setattr__(self, "error_message", "Unknown export error")


ExportResult = Union[ExportSuccess, ExportFailure]
