"""Context menu over a text selection in the PDF viewer.

The controller is toolkit-agnostic: the window selection, the document and
the clipboard are passed in as small protocol objects, so the same logic
backs a browser bridge or a desktop viewer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

VIEWER_SURFACE_ID = "pdf-viewer-container"


class SelectionRange(Protocol):
    @property
    def common_ancestor_container(self) -> Any: ...


class WindowSelection(Protocol):
    @property
    def is_collapsed(self) -> bool: ...

    @property
    def range_count(self) -> int: ...

    def to_string(self) -> str: ...

    def get_range_at(self, index: int) -> SelectionRange: ...


class Element(Protocol):
    def contains(self, node: Any) -> bool: ...


class Document(Protocol):
    def get_element_by_id(self, element_id: str) -> Optional[Element]: ...


class Clipboard(Protocol):
    def write_text(self, text: str) -> Any: ...


class ContextMenuEvent(Protocol):
    @property
    def client_x(self) -> int: ...

    @property
    def client_y(self) -> int: ...

    def prevent_default(self) -> None: ...


@dataclass(frozen=True)
class ContextMenuPosition:
    x: int
    y: int


@dataclass(frozen=True)
class Selection:
    text: str
    anchor_point: ContextMenuPosition


class ContextMenuController:
    """Opens the translate/explain menu for selections inside the viewer.

    ``position`` is the whole contract: ``None`` while the menu is closed,
    the event's client coordinates while it is open.
    """

    def __init__(
        self,
        *,
        get_selection: Callable[[], Optional[WindowSelection]],
        document: Document,
        clipboard: Clipboard,
        trigger_translation: Callable[[bool], Any],
        trigger_explanation: Callable[[], Any],
        viewer_surface_id: str = VIEWER_SURFACE_ID,
    ) -> None:
        self._get_selection = get_selection
        self._document = document
        self._clipboard = clipboard
        self._trigger_translation = trigger_translation
        self._trigger_explanation = trigger_explanation
        self.viewer_surface_id = viewer_surface_id
        self.selection: Optional[Selection] = None

    @property
    def position(self) -> Optional[ContextMenuPosition]:
        return self.selection.anchor_point if self.selection else None

    def _inside_viewer(self, window_selection: WindowSelection) -> bool:
        if window_selection.range_count < 1:
            return False
        container = window_selection.get_range_at(0).common_ancestor_container
        viewer = self._document.get_element_by_id(self.viewer_surface_id)
        return viewer is not None and viewer.contains(container)

    def handle_context_menu(self, event: ContextMenuEvent) -> bool:
        """Open the menu if the event sits on a selection inside the viewer.

        Returns ``True`` when the default menu was suppressed.
        """
        window_selection = self._get_selection()
        if window_selection is None or window_selection.is_collapsed:
            return False

        selected_text = window_selection.to_string().strip()
        if not selected_text:
            return False

        if not self._inside_viewer(window_selection):
            return False

        event.prevent_default()
        self.selection = Selection(
            text=selected_text,
            anchor_point=ContextMenuPosition(x=event.client_x, y=event.client_y),
        )
        return True

    def copy(self) -> None:
        # Read the live selection; it may have changed since the menu opened.
        window_selection = self._get_selection()
        if window_selection is not None:
            self._clipboard.write_text(window_selection.to_string())

    def translate(self) -> None:
        self._trigger_translation(False)

    def explain(self) -> None:
        self._trigger_explanation()

    def close(self) -> None:
        self.selection = None
