"""In-memory DOM.

A small element tree implementing the guidance DOM protocols, for headless
runs (CLI dry runs, tests). Each MemoryElement wraps a BeautifulSoup tag;
selectors are resolved by soupsieve, so the full CSS selector syntax the host
contract uses works here too. Invalid selectors raise
``soupsieve.SelectorSyntaxError``.
"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence

import soupsieve as sv
from bs4 import BeautifulSoup, NavigableString, Tag

from pageguide.guidance.dom import Rect

# Tag factory; the tags it creates are re-parented into element trees.
_SOUP = BeautifulSoup("", "html.parser")

# tag id -> wrapping element; entries die with their element
_ELEMENTS: weakref.WeakValueDictionary[int, MemoryElement] = weakref.WeakValueDictionary()


def _element(node: Tag | None) -> MemoryElement | None:
    return None if node is None else _ELEMENTS.get(id(node))


class MemoryElement:
    """A DOM element held in memory."""

    def __init__(
        self,
        tag: str = "div",
        *children: MemoryElement,
        classes: str | Iterable[str] = (),
        text: str = "",
        rect: Rect | None = None,
        attrs: Mapping[str, str] | None = None,
    ) -> None:
        self.node: Tag = _SOUP.new_tag(tag.lower())
        _ELEMENTS[id(self.node)] = self
        for name, value in (attrs or {}).items():
            self.node[name] = value
        names = classes.split() if isinstance(classes, str) else list(classes)
        self.add_class(*names)
        self.parent: MemoryElement | None = None
        self.children: list[MemoryElement] = []
        self.style: dict[str, str] = {}
        self.rect = rect or Rect()
        self.click_count = 0
        self.scroll_count = 0
        self._listeners: dict[str, list[Callable[[], None]]] = {}
        self.set_text(text)
        for child in children:
            self.append_child(child)

    def __repr__(self) -> str:
        classes = "".join(f".{c}" for c in self.class_list)
        return f"<{self.tag}{classes}>"

    @property
    def tag(self) -> str:
        return self.node.name

    # -- tree -----------------------------------------------------------------

    def append_child(self, child: MemoryElement) -> MemoryElement:
        if child.parent is not None:
            child.remove()
        child.parent = self
        self.children.append(child)
        self.node.append(child.node)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None
            self.node.extract()

    @property
    def is_connected(self) -> bool:
        """Whether the element is attached under a document root."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node.tag == "html"

    def iter_descendants(self) -> Iterator[MemoryElement]:
        """Depth-first, document order, excluding self."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    # -- attributes, classes, text -------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        value = self.node.get(name)
        if value is None or isinstance(value, str):
            return value
        return " ".join(value)

    def set_attribute(self, name: str, value: str) -> None:
        self.node[name] = value

    @property
    def class_list(self) -> tuple[str, ...]:
        return tuple(self.node.get("class") or ())

    def has_class(self, name: str) -> bool:
        return name in self.class_list

    def add_class(self, *names: str) -> None:
        classes = list(self.class_list)
        classes.extend(n for n in dict.fromkeys(names) if n not in classes)
        if classes:
            self.node["class"] = classes

    def remove_class(self, *names: str) -> None:
        classes = [c for c in self.class_list if c not in names]
        if classes:
            self.node["class"] = classes
        elif "class" in self.node.attrs:
            del self.node["class"]

    @property
    def text_content(self) -> str:
        return self.node.get_text()

    def set_text(self, text: str) -> None:
        """Replace the element's own text; descendant text is kept."""
        for string in [c for c in self.node.contents if isinstance(c, NavigableString)]:
            string.extract()
        if text:
            self.node.insert(0, NavigableString(text))

    # -- queries ---------------------------------------------------------------

    def matches(self, selector: str) -> bool:
        return sv.match(selector, self.node)

    def query_selector_all(self, selector: str) -> Sequence[MemoryElement]:
        return [_element(node) for node in sv.select(selector, self.node)]

    def query_selector(self, selector: str) -> MemoryElement | None:
        return _element(sv.select_one(selector, self.node))

    def closest(self, selector: str) -> MemoryElement | None:
        return _element(sv.closest(selector, self.node))

    # -- interaction -------------------------------------------------------------

    def add_event_listener(self, event: str, handler: Callable[[], None]) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def dispatch(self, event: str) -> None:
        for handler in list(self._listeners.get(event, ())):
            handler()

    def click(self) -> None:
        self.click_count += 1
        self.dispatch("click")

    def scroll_into_view(self) -> None:
        self.scroll_count += 1

    def bounding_rect(self) -> Rect:
        return self.rect


class MemoryDocument:
    """Document holding an ``html > body`` tree."""

    def __init__(self, *children: MemoryElement, viewport: tuple[float, float] = (1280, 800)) -> None:
        self.root = MemoryElement("html")
        self._body = self.root.append_child(MemoryElement("body", *children))
        self._viewport = viewport

    @property
    def body(self) -> MemoryElement:
        return self._body

    @property
    def viewport(self) -> tuple[float, float]:
        return self._viewport

    def query_selector(self, selector: str) -> MemoryElement | None:
        return self.root.query_selector(selector)

    def query_selector_all(self, selector: str) -> Sequence[MemoryElement]:
        return self.root.query_selector_all(selector)

    def create_element(self, tag: str) -> MemoryElement:
        return MemoryElement(tag)
