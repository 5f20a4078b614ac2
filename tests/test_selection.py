"""
Tests for the viewer context menu
"""
import pytest

from pedaru_assist.selection import ContextMenuController, ContextMenuPosition, Selection


class _FakeNode:
    def __init__(self, parent=None):
        self.parent = parent


class _FakeElement(_FakeNode):
    def contains(self, node):
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False


class _FakeRange:
    def __init__(self, container):
        self.common_ancestor_container = container


class _FakeSelection:
    def __init__(self, text, container, collapsed=False):
        self.text = text
        self.container = container
        self.is_collapsed = collapsed
        self.range_count = 0 if collapsed else 1

    def to_string(self):
        return self.text

    def get_range_at(self, index):
        return _FakeRange(self.container)


class _FakeDocument:
    def __init__(self, elements):
        self.elements = elements

    def get_element_by_id(self, element_id):
        return self.elements.get(element_id)


class _FakeClipboard:
    def __init__(self):
        self.written = []

    def write_text(self, text):
        self.written.append(text)


class _FakeEvent:
    def __init__(self, x=120, y=340):
        self.client_x = x
        self.client_y = y
        self.default_prevented = False

    def prevent_default(self):
        self.default_prevented = True


class _Page:
    """A viewer surface with one text node inside and one outside."""

    def __init__(self, with_viewer=True):
        self.body = _FakeElement()
        self.viewer = _FakeElement(parent=self.body)
        self.inside = _FakeNode(parent=_FakeNode(parent=self.viewer))
        self.outside = _FakeNode(parent=self.body)
        self.document = _FakeDocument({"pdf-viewer-container": self.viewer} if with_viewer else {})
        self.clipboard = _FakeClipboard()
        self.translations = []
        self.explanations = []
        self.selection = None

    def controller(self):
        return ContextMenuController(
            get_selection=lambda: self.selection,
            document=self.document,
            clipboard=self.clipboard,
            trigger_translation=self.translations.append,
            trigger_explanation=lambda: self.explanations.append(True),
        )


@pytest.fixture
def page():
    return _Page()


class TestHandleContextMenu:
    """Test when the custom menu opens"""

    def test_selection_inside_viewer(self, page):
        page.selection = _FakeSelection("  harness \n", page.inside)
        controller = page.controller()
        event = _FakeEvent(15, 27)
        assert controller.handle_context_menu(event) is True
        assert event.default_prevented
        assert controller.position == ContextMenuPosition(x=15, y=27)
        assert controller.selection == Selection(text="harness", anchor_point=ContextMenuPosition(15, 27))

    def test_viewer_itself_as_container(self, page):
        page.selection = _FakeSelection("two paragraphs", page.viewer)
        controller = page.controller()
        assert controller.handle_context_menu(_FakeEvent()) is True

    def test_no_selection(self, page):
        controller = page.controller()
        event = _FakeEvent()
        assert controller.handle_context_menu(event) is False
        assert controller.position is None
        assert not event.default_prevented

    def test_collapsed_selection(self, page):
        page.selection = _FakeSelection("", page.inside, collapsed=True)
        controller = page.controller()
        event = _FakeEvent()
        assert controller.handle_context_menu(event) is False
        assert controller.position is None
        assert not event.default_prevented

    def test_whitespace_only_selection(self, page):
        page.selection = _FakeSelection(" \n\t ", page.inside)
        controller = page.controller()
        event = _FakeEvent()
        assert controller.handle_context_menu(event) is False
        assert controller.position is None
        assert not event.default_prevented

    def test_selection_outside_viewer(self, page):
        page.selection = _FakeSelection("Settings", page.outside)
        controller = page.controller()
        event = _FakeEvent()
        assert controller.handle_context_menu(event) is False
        assert controller.position is None
        assert not event.default_prevented

    def test_missing_viewer_surface(self):
        page = _Page(with_viewer=False)
        page.selection = _FakeSelection("text", page.inside)
        controller = page.controller()
        event = _FakeEvent()
        assert controller.handle_context_menu(event) is False
        assert controller.position is None
        assert not event.default_prevented

    def test_new_selection_replaces_position(self, page):
        controller = page.controller()
        page.selection = _FakeSelection("first", page.inside)
        controller.handle_context_menu(_FakeEvent(1, 2))
        page.selection = _FakeSelection("second", page.inside)
        controller.handle_context_menu(_FakeEvent(3, 4))
        assert controller.position == ContextMenuPosition(3, 4)
        assert controller.selection.text == "second"


class TestMenuActions:
    """Test actions once the menu is open"""

    def test_copy_reads_live_selection(self, page):
        page.selection = _FakeSelection("  original ", page.inside)
        controller = page.controller()
        controller.handle_context_menu(_FakeEvent())
        page.selection = _FakeSelection(" changed since ", page.inside)
        controller.copy()
        assert page.clipboard.written == [" changed since "]

    def test_copy_without_selection(self, page):
        controller = page.controller()
        controller.copy()
        assert page.clipboard.written == []

    def test_translate_and_explain_forward(self, page):
        controller = page.controller()
        controller.translate()
        controller.explain()
        assert page.translations == [False]
        assert page.explanations == [True]

    def test_close_is_idempotent(self, page):
        page.selection = _FakeSelection("text", page.inside)
        controller = page.controller()
        controller.handle_context_menu(_FakeEvent())
        controller.close()
        assert controller.position is None
        controller.close()
        assert controller.position is None
