"""Runtime configuration for theme build, serve and watch tasks."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

SUPPORTED_OUTPUT_STYLES = ("nested", "expanded", "compact", "compressed")

_DEFAULT_INCLUDE_PATHS = (
    "bower_components/bourbon/app/assets/stylesheets",
    "bower_components/neat/app/assets/stylesheets",
    "bower_components/font-awesome/scss",
    "bower_components/wyrm/sass",
)


@dataclass(slots=True)
class PathSettings:
    """Filesystem layout, relative to the theme directory unless absolute."""

    theme_dir: Path = Path(".")
    sass_dir: str = "sass"
    sass_glob: str = "*.sass"
    bower_dir: str = "bower_components"
    theme_package_dir: str = "sphinx_rtd_theme"
    css_dir: str = "sphinx_rtd_theme/static/css"
    fonts_glob: str = "bower_components/font-awesome/fonts/*"
    fonts_dir: str = "sphinx_rtd_theme/static/fonts"
    docs_root: str = "../../.."
    docs_source_dir: str = "../../../source"
    build_dir: str = "../../../build"
    clean_force: bool = True

    def resolve(self, relative: str) -> Path:
        """Return a normalized path anchored at the theme directory."""

        return Path(os.path.normpath(self.theme_dir / relative))

    def pattern(self, relative: str) -> str:
        """Return a glob pattern anchored at the theme directory."""

        return os.path.normpath(os.path.join(self.theme_dir, relative))


@dataclass(slots=True)
class StyleSettings:
    """Sass compilation settings."""

    dev_output_style: str = "expanded"
    build_output_style: str = "compressed"
    output_extension: str = ".css"
    include_paths: tuple[str, ...] = _DEFAULT_INCLUDE_PATHS


@dataclass(slots=True)
class ServerSettings:
    """Local preview server settings."""

    host: str = "localhost"
    port: int = 1919
    livereload_port: int = 1919

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"


@dataclass(slots=True)
class CommandSettings:
    """External command lines, run from the theme directory."""

    dependency_update: str = "bower update"
    docs_builder: str | None = None

    def docs_builder_command(self, paths: PathSettings) -> str:
        if self.docs_builder:
            return self.docs_builder
        return shlex.join(["sphinx-build", paths.docs_source_dir, paths.build_dir])


@dataclass(slots=True)
class WatchSettings:
    """File watch settings."""

    reload_delay: float | None = None


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    paths: PathSettings = field(default_factory=PathSettings)
    styles: StyleSettings = field(default_factory=StyleSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    commands: CommandSettings = field(default_factory=CommandSettings)
    watch: WatchSettings = field(default_factory=WatchSettings)

    @classmethod
    def from_env(cls, theme_dir: Path | None = None) -> Settings:
        """Load settings from environment; unset variables keep the built-in layout."""

        defaults = PathSettings()
        resolved_theme_dir = theme_dir or Path(os.getenv("THEME_TASKS_THEME_DIR", "."))
        return cls(
            paths=PathSettings(
                theme_dir=resolved_theme_dir.expanduser().resolve(),
                sass_dir=os.getenv("THEME_TASKS_SASS_DIR", defaults.sass_dir),
                css_dir=os.getenv("THEME_TASKS_CSS_DIR", defaults.css_dir),
                fonts_glob=os.getenv("THEME_TASKS_FONTS_GLOB", defaults.fonts_glob),
                fonts_dir=os.getenv("THEME_TASKS_FONTS_DIR", defaults.fonts_dir),
                docs_root=os.getenv("THEME_TASKS_DOCS_ROOT", defaults.docs_root),
                docs_source_dir=os.getenv("THEME_TASKS_DOCS_SOURCE_DIR", defaults.docs_source_dir),
                build_dir=os.getenv("THEME_TASKS_BUILD_DIR", defaults.build_dir),
                clean_force=_env_bool("THEME_TASKS_CLEAN_FORCE", default=True),
            ),
            styles=StyleSettings(
                dev_output_style=os.getenv("THEME_TASKS_SASS_DEV_STYLE", "expanded"),
                build_output_style=os.getenv("THEME_TASKS_SASS_BUILD_STYLE", "compressed"),
                include_paths=_env_list("THEME_TASKS_SASS_INCLUDE_PATHS", _DEFAULT_INCLUDE_PATHS),
            ),
            server=ServerSettings(
                host=os.getenv("THEME_TASKS_HOST", "localhost"),
                port=int(os.getenv("THEME_TASKS_PORT", "1919")),
                livereload_port=int(
                    os.getenv("THEME_TASKS_LIVERELOAD_PORT", os.getenv("THEME_TASKS_PORT", "1919")),
                ),
            ),
            commands=CommandSettings(
                dependency_update=os.getenv("THEME_TASKS_DEPENDENCY_UPDATE_COMMAND", "bower update"),
                docs_builder=os.getenv("THEME_TASKS_DOCS_BUILDER_COMMAND") or None,
            ),
            watch=WatchSettings(
                reload_delay=_env_float_or_none("THEME_TASKS_RELOAD_DELAY"),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the tasks cannot work with."""

        for name, port in (
            ("THEME_TASKS_PORT", self.server.port),
            ("THEME_TASKS_LIVERELOAD_PORT", self.server.livereload_port),
        ):
            if not 0 < port < 65_536:
                raise ValueError(f"{name} must be within 1..65535, got {port}.")
        for name, style in (
            ("THEME_TASKS_SASS_DEV_STYLE", self.styles.dev_output_style),
            ("THEME_TASKS_SASS_BUILD_STYLE", self.styles.build_output_style),
        ):
            if style not in SUPPORTED_OUTPUT_STYLES:
                raise ValueError(
                    f"{name} must be one of {', '.join(SUPPORTED_OUTPUT_STYLES)}; got {style!r}.",
                )
        if not self.styles.output_extension.startswith("."):
            raise ValueError("Style output extension must start with a dot.")
        if self.watch.reload_delay is not None and self.watch.reload_delay < 0:
            raise ValueError("THEME_TASKS_RELOAD_DELAY must be >= 0.")
        if not self.commands.dependency_update.strip():
            raise ValueError("THEME_TASKS_DEPENDENCY_UPDATE_COMMAND must not be empty.")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _env_float_or_none(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as error:
        raise ValueError(f"Invalid float value for {name}: {raw!r}") from error


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
