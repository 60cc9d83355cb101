"""
Style Snapshot

Scoped borrowing of inline style properties. Every element touched through a
snapshot gets its original ``style`` attribute back, byte for byte, when the
snapshot is restored, whatever path the caller exits through.

Usage:
    with StyleSnapshot() as snapshot:
        snapshot.borrow(root, "width", "800px")
        ...  # measure
    # root's style attribute is back to what it was
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from bs4 import Tag

from utils.inline_style import get_style_property, set_style_property
from utils.logger import logger

TRACKED_PROPERTIES = ("width", "height", "transform", "position")


@dataclass
class _SnapshotEntry:
    element: Tag
    raw_style: Optional[str]
    originals: Dict[str, Optional[str]] = field(default_factory=dict)


class StyleSnapshot:
    """Records original inline styles per node and restores them on exit."""

    def __init__(self, label: str = "export"):
        self.label = label
        # Keyed by id(): bs4 tags compare equal by markup, not identity
        self._entries: Dict[int, _SnapshotEntry] = {}
        self._restored = False

    def __enter__(self) -> "StyleSnapshot":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.restore()
        return False

    def _entry_for(self, element: Tag) -> _SnapshotEntry:
        key = id(element)
        entry = self._entries.get(key)
        if entry is None:
            raw = element.get("style")
            entry = _SnapshotEntry(element=element, raw_style=raw)
            self._entries[key] = entry
        return entry

    def track(self, element: Tag, properties: Iterable[str] = TRACKED_PROPERTIES) -> None:
        """Record the element's current inline style without changing it."""
        entry = self._entry_for(element)
        for name in properties:
            if name not in entry.originals:
                entry.originals[name] = get_style_property(element, name)
        self._restored = False

    def borrow(self, element: Tag, name: str, value: Optional[str]) -> None:
        """
        Override one inline property for the lifetime of the snapshot.

        Args:
            element: Node whose inline style is borrowed
            name: CSS property name
            value: Temporary value (None removes the property)
        """
        entry = self._entry_for(element)
        if name not in entry.originals:
            entry.originals[name] = get_style_property(element, name)
        set_style_property(element, name, value)
        self._restored = False

    @property
    def borrowed_properties(self) -> List[str]:
        """Names of every property recorded so far, across all nodes."""
        names = []
        for entry in self._entries.values():
            for name in entry.originals:
                if name not in names:
                    names.append(name)
        return names

    def __len__(self) -> int:
        return len(self._entries)

    def restore(self) -> int:
        """
        Put every recorded element back to its original inline style.

        Safe to call more than once.

        Returns:
            Number of elements whose style attribute had to be rewritten
        """
        if self._restored:
            return 0

        rewritten = 0
        for entry in self._entries.values():
            element = entry.element
            current = element.get("style")
            if current == entry.raw_style:
                continue

            if entry.raw_style is None:
                del element["style"]
            else:
                element["style"] = entry.raw_style
            rewritten += 1

        if rewritten:
            logger.debug(
                f"Restored inline styles on {rewritten} element(s) after {self.label} "
                f"(borrowed: {', '.join(self.borrowed_properties) or 'none'})",
                source="StyleSnapshot"
            )

        self._restored = True
        return rewritten

    def discard(self) -> None:
        """Restore and forget every entry."""
        self.restore()
        self._entries.clear()
