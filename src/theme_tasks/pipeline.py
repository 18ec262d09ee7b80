"""Theme task table: primitive tool targets and the fonts/default/watch aliases."""

from __future__ import annotations

from theme_tasks.config import Settings
from theme_tasks.tasks.models import (
    CompileStyles,
    CopyAssets,
    ExternalCommand,
    OpenBrowser,
    RemovePaths,
    ServeDirectory,
    TaskDefinition,
    WatchFiles,
    WatchRule,
)
from theme_tasks.tasks.registry import TaskRegistry, TaskTable

DEFAULT_TARGET = "default"


def build_task_table(settings: Settings) -> TaskTable:
    """Register every theme task and freeze the table."""

    registry = TaskRegistry()
    _register_primitives(registry, settings)

    registry.register(
        "fonts",
        TaskDefinition.composite(
            "clean:fonts",
            "copy:fonts",
            description="Replace theme fonts with the bundled Font Awesome files.",
        ),
    )
    registry.register(
        DEFAULT_TARGET,
        TaskDefinition.composite(
            "exec:bower_update",
            "clean:build",
            "sass:build",
            "exec:build_sphinx",
            description="Full build: dependencies, compressed CSS and documentation.",
        ),
    )
    registry.register(
        "watch",
        TaskDefinition.composite(
            "exec:bower_update",
            "clean:build",
            "sass:dev",
            "exec:build_sphinx",
            "connect",
            "open",
            "watch:files",
            description="Development loop: build, serve with live reload and rebuild on change.",
        ),
    )
    return registry.freeze()


def _register_primitives(registry: TaskRegistry, settings: Settings) -> None:
    paths = settings.paths
    styles = settings.styles
    theme_dir = paths.theme_dir
    build_dir = paths.resolve(paths.build_dir)

    registry.register(
        "exec:bower_update",
        TaskDefinition.primitive(
            ExternalCommand(command=settings.commands.dependency_update, cwd=theme_dir),
            description="Update front-end dependencies.",
        ),
    )
    registry.register(
        "exec:build_sphinx",
        TaskDefinition.primitive(
            ExternalCommand(command=settings.commands.docs_builder_command(paths), cwd=theme_dir),
            description="Build the documentation with the theme.",
        ),
    )
    registry.register(
        "clean:build",
        TaskDefinition.primitive(
            RemovePaths(targets=(build_dir,), force=paths.clean_force),
            description="Remove the documentation build output.",
        ),
    )
    registry.register(
        "clean:fonts",
        TaskDefinition.primitive(
            RemovePaths(targets=(paths.resolve(paths.fonts_dir),), force=paths.clean_force),
            description="Remove the theme font directory.",
        ),
    )
    registry.register(
        "copy:fonts",
        TaskDefinition.primitive(
            CopyAssets(
                source_glob=paths.pattern(paths.fonts_glob),
                destination=paths.resolve(paths.fonts_dir),
                files_only=True,
            ),
            description="Copy font files into the theme static directory.",
        ),
    )
    for target, output_style in (
        ("sass:dev", styles.dev_output_style),
        ("sass:build", styles.build_output_style),
    ):
        registry.register(
            target,
            TaskDefinition.primitive(
                CompileStyles(
                    source_dir=paths.resolve(paths.sass_dir),
                    source_glob=paths.sass_glob,
                    destination=paths.resolve(paths.css_dir),
                    output_style=output_style,
                    output_extension=styles.output_extension,
                    include_paths=tuple(paths.resolve(path) for path in styles.include_paths),
                ),
                description=f"Compile Sass sources ({output_style}).",
            ),
        )
    registry.register(
        "connect",
        TaskDefinition.primitive(
            ServeDirectory(
                root=build_dir,
                host=settings.server.host,
                port=settings.server.port,
                livereload_port=settings.server.livereload_port,
            ),
            description="Prepare the live-reload server; it starts listening with watch:files.",
        ),
    )
    registry.register(
        "open",
        TaskDefinition.primitive(
            OpenBrowser(url=settings.server.url),
            description="Open the preview in a browser.",
        ),
    )
    registry.register(
        "watch:files",
        TaskDefinition.primitive(
            WatchFiles(rules=watch_rules(settings), reload_delay=settings.watch.reload_delay),
            description="Rebuild on source changes until stopped.",
        ),
    )


def watch_rules(settings: Settings) -> tuple[WatchRule, ...]:
    paths = settings.paths
    docs_root = paths.docs_root.rstrip("/")
    return (
        WatchRule(
            name="sass",
            patterns=(
                paths.pattern(f"{paths.sass_dir}/{paths.sass_glob}"),
                paths.pattern(f"{paths.bower_dir}/**/*.sass"),
            ),
            tasks=("sass:dev",),
        ),
        WatchRule(
            name="sphinx",
            patterns=(
                paths.pattern(f"{paths.theme_package_dir}/**/*"),
                paths.pattern(f"{docs_root}/**/*.rst"),
                paths.pattern(f"{docs_root}/**/*.py"),
            ),
            tasks=("clean:build", "exec:build_sphinx"),
        ),
        WatchRule(
            name="livereload",
            patterns=(paths.pattern(f"{paths.build_dir.rstrip('/')}/**/*"),),
            live_reload=True,
        ),
    )
