"""Reusable components.

Components live in a directory of the source tree (``/_components`` by
default). Each file is a template rendered by its engine with the props it
is called with. A component may declare ``css`` and ``js`` snippets in its
front matter; they are bundled into one stylesheet and one script page.

Templates reach components through a :class:`ComponentTree`, exposed under
a global data name (``comp`` by default)::

    {{ comp.button(text="Save") }}
    {{ comp.forms.input(name="email") }}
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tabby.core.page import Page
from tabby.core.paths import normalize_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tabby._types import Data, Loader
    from tabby.core.engines import Engine
    from tabby.core.reader import Reader


@dataclass(frozen=True, slots=True)
class Component:
    """A loaded component.

    Attributes:
        name: Lookup name (file stem, or the ``name`` key of its data).
        path: Logical path of the component file.
        template: Template source.
        engine: Engine that renders the template.
        data: Default props (front matter minus reserved keys).
        css: Stylesheet snippet, bundled into the components css page.
        js: Script snippet, bundled into the components js page.

    """

    name: str
    path: str
    template: Any
    engine: Engine = field(compare=False)
    data: Data = field(default_factory=dict, compare=False)
    css: str | None = None
    js: str | None = None

    def __call__(self, **props: Any) -> str:
        return self.render(props)

    def render(self, props: Data | None = None) -> str:
        return self.engine.render(self.template, {**self.data, **(props or {})}, self.path)


type ComponentNode = Component | dict[str, ComponentNode]


class ComponentTree:
    """Read-only named access to a tree of components.

    Attribute access and item access are equivalent. Nested directories are
    returned as nested trees. Unknown names raise ``AttributeError`` /
    ``KeyError`` so template engines report them as undefined.

    """

    __slots__ = ("_nodes",)

    def __init__(self, nodes: dict[str, ComponentNode]) -> None:
        self._nodes = nodes

    def __getattr__(self, name: str) -> Component | ComponentTree:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, name: str) -> Component | ComponentTree:
        node = self._nodes[name]
        if isinstance(node, Component):
            return node
        return ComponentTree(node)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._nodes))

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"ComponentTree({sorted(self._nodes)!r})"

    def components(self) -> Iterator[Component]:
        """Every component in the tree, depth first."""
        for name in sorted(self._nodes):
            node = self._nodes[name]
            if isinstance(node, Component):
                yield node
            else:
                yield from ComponentTree(node).components()


class ComponentLoader:
    """Loads a components directory into a tree.

    Args:
        reader: Shared reader (and its file-read cache).

    """

    def __init__(self, reader: Reader) -> None:
        self._reader = reader
        self._formats: dict[str, tuple[Loader, Engine]] = {}

    def set(self, extensions: Iterable[str], loader: Loader, engine: Engine) -> None:
        for ext in extensions:
            self._formats[ext] = (loader, engine)

    def delete_cache(self, filename: str) -> None:
        """Forget the compiled template of one component file."""
        for engine in self._engines():
            engine.delete_cache(filename)

    def clear_cache(self) -> None:
        for engine in self._engines():
            engine.clear_cache()

    def _engines(self) -> list[Engine]:
        engines: list[Engine] = []
        for _, engine in self._formats.values():
            if engine not in engines:
                engines.append(engine)
        return engines

    def load(self, directory: str) -> dict[str, ComponentNode] | None:
        """Load every component under *directory*.

        Returns ``None`` when the directory does not exist or holds no
        component of a registered format.
        """
        directory = normalize_path(directory)
        if not self._reader.path(directory).is_dir():
            return None
        nodes = self._load_dir(directory)
        return nodes or None

    def _load_dir(self, directory: str) -> dict[str, ComponentNode]:
        nodes: dict[str, ComponentNode] = {}
        fs_dir = self._reader.path(directory)
        for entry in sorted(fs_dir.iterdir(), key=lambda p: p.name):
            if entry.name.startswith("."):
                continue
            logical = posixpath.join(directory, entry.name)
            if entry.is_dir():
                nested = self._load_dir(logical)
                if nested:
                    nodes[entry.name] = nested
                continue
            component = self._load_file(logical, entry.name)
            if component is not None:
                nodes[component.name] = component
        return nodes

    def _load_file(self, logical: str, filename: str) -> Component | None:
        for ext in sorted(self._formats, key=len, reverse=True):
            if filename.endswith(ext):
                loader, engine = self._formats[ext]
                break
        else:
            return None

        data = self._reader.read(logical, loader)
        template = data.pop("content", "")
        name = str(data.pop("name", filename[: -len(ext)]))
        css = data.pop("css", None)
        js = data.pop("js", None)
        return Component(
            name=name,
            path=logical,
            template=template,
            engine=engine,
            data=data,
            css=css,
            js=js,
        )


class Components:
    """Turns a loaded component tree into an accessor and bundled assets.

    Args:
        css_file: Output URL of the bundled stylesheet.
        js_file: Output URL of the bundled script.

    """

    def __init__(self, css_file: str, js_file: str) -> None:
        self._css_file = css_file
        self._js_file = js_file
        self._tree: ComponentTree | None = None

    def to_accessor(self, nodes: dict[str, ComponentNode]) -> ComponentTree:
        """Wrap *nodes*; the tree is remembered for :meth:`add_assets`."""
        self._tree = ComponentTree(nodes)
        return self._tree

    def clear(self) -> None:
        self._tree = None

    def add_assets(self, pages: list[Page]) -> None:
        """Append the css/js bundle pages of the current tree to *pages*."""
        if self._tree is None:
            return
        components = list(self._tree.components())
        css = [c.css for c in components if c.css]
        js = [c.js for c in components if c.js]
        if css:
            pages.append(Page.create(self._css_file, "\n".join(css)))
        if js:
            pages.append(Page.create(self._js_file, "\n".join(js)))
