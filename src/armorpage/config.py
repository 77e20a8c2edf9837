"""Application and pages configuration.

Both configs are frozen dataclasses: immutable after creation and
checked once in ``__post_init__``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from armorpage.errors import ConfigurationError

type CacheMode = Literal["request", "cache", "hybrid"]

_CACHE_MODES: frozenset[str] = frozenset({"request", "cache", "hybrid"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Host application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, public_dir=None)
    """

    # Server
    host: str = "localhost"
    port: int = 3000
    debug: bool = False

    # Static files (``None`` disables the public mount)
    public_dir: str | Path | None = "./public"
    public_url: str = "/public"

    # Logging (applied by the CLI; library code never configures handlers)
    log_level: str = "info"


@dataclass(frozen=True, slots=True)
class PagesConfig:
    """Configuration for the file-routed pages middleware.

    Cache modes:

    - ``"request"``: rescan the routes directory on every request.
    - ``"cache"``: scan once and keep the snapshot; only file-system
      change notifications (``watch=True``) or an explicit ``rescan()``
      replace it.
    - ``"hybrid"``: like ``"cache"``, but a snapshot older than
      ``rescan_interval`` seconds is rescanned on the next request.

    When *mode* is left unset it is derived from *rescan_on_request*.

    Usage::

        PagesConfig(routes_dir="site/routes", watch=True)
    """

    routes_dir: str | Path = "./routes"
    watch: bool = False
    rescan_on_request: bool = False
    log: bool = True
    mode: CacheMode | None = None
    debounce: float = 0.05
    rescan_interval: float = 2.0

    def __post_init__(self) -> None:
        if self.mode is not None and self.mode not in _CACHE_MODES:
            msg = (
                f"Unknown pages cache mode {self.mode!r}. "
                f"Expected one of: {', '.join(sorted(_CACHE_MODES))}"
            )
            raise ConfigurationError(msg)
        if self.debounce < 0:
            msg = f"debounce must be >= 0 seconds, got {self.debounce}"
            raise ConfigurationError(msg)
        if self.rescan_interval <= 0:
            msg = f"rescan_interval must be > 0 seconds, got {self.rescan_interval}"
            raise ConfigurationError(msg)

    @property
    def cache_mode(self) -> CacheMode:
        """The effective cache mode."""
        if self.mode is not None:
            return self.mode
        return "request" if self.rescan_on_request else "cache"

    @property
    def routes_root(self) -> Path:
        """Absolute routes directory."""
        return Path(self.routes_dir).resolve()
