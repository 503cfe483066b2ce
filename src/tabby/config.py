"""Tabby configuration.

SiteConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit


@dataclass(frozen=True, slots=True)
class ServerOptions:
    """Options for the local development server.

    Attributes:
        port: Bind port.
        open: Open the site in a browser once the server is up.
        page404: Output path of the document served for missing files.
            A trailing slash means the directory's ``index.html``.

    """

    port: int = 3000
    open: bool = False
    page404: str = "/404.html"


@dataclass(frozen=True, slots=True)
class WatcherOptions:
    """Options for the file watchers.

    Attributes:
        ignore: Extra paths (relative to the source dir) the watcher skips.
        debounce: Debounce window in milliseconds.

    """

    ignore: tuple[str, ...] = ()
    debounce: int = 100


@dataclass(frozen=True, slots=True)
class ComponentsOptions:
    """Options for reusable components.

    Attributes:
        directory: Source directory holding component files.
        variable: Global data name the component tree is exposed under.
        css_file: Output path of the bundled component stylesheet.
        js_file: Output path of the bundled component script.

    """

    directory: str = "/_components"
    variable: str = "comp"
    css_file: str = "/components.css"
    js_file: str = "/components.js"


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Configuration for a Tabby site.

    Attributes:
        cwd: Working directory; ``src`` and ``dest`` resolve against it.
            Always resolved to an absolute path on construction.
        src: Source directory.
        dest: Destination (output) directory.
        includes: Default directory for layouts and includes, inside ``src``.
        location: Public URL of the site. Its path is the base path prepended
            to every output URL, its origin is used for absolute URLs.
        quiet: Suppress status output.
        dev: Development mode (draft pages are built).
        pretty_urls: Write ``/about.md`` as ``/about/index.html``.
        server: Dev server options.
        watcher: File watcher options.
        components: Component options.

    """

    cwd: Path = field(default_factory=Path.cwd)
    src: str = "./"
    dest: str = "./_site"
    includes: str = "_includes"
    location: str = "http://localhost/"
    quiet: bool = False
    dev: bool = False
    pretty_urls: bool = True
    server: ServerOptions = field(default_factory=ServerOptions)
    watcher: WatcherOptions = field(default_factory=WatcherOptions)
    components: ComponentsOptions = field(default_factory=ComponentsOptions)

    def __post_init__(self) -> None:
        if not self.cwd.is_absolute():
            object.__setattr__(self, "cwd", self.cwd.resolve())

    @property
    def src_path(self) -> Path:
        """Absolute path to the source directory."""
        return (self.cwd / self.src).resolve()

    @property
    def dest_path(self) -> Path:
        """Absolute path to the destination directory."""
        return (self.cwd / self.dest).resolve()

    @property
    def base_path(self) -> str:
        """Path component of ``location``, always starting with ``/``."""
        path = urlsplit(self.location).path or "/"
        return path if path.startswith("/") else "/" + path

    @property
    def origin(self) -> str:
        """Scheme and host of ``location`` (e.g. ``https://example.com``)."""
        parts = urlsplit(self.location)
        return f"{parts.scheme}://{parts.netloc}"
