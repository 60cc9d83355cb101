from dataclasses import dataclass

PREVIEW_CONTENT_ID = "preview-content"


@dataclass(frozen=True)
class CaptureTarget:
    """
    Identifies the subtree to export by element id.

    The id is resolved against the current preview document on every export,
    so a target survives re-renders of the preview.
    """

    element_id: str = PREVIEW_CONTENT_ID

    def __str__(self) -> str:
        return f"#{self.element_id}"
