"""Sass compilation action backed by libsass."""

from __future__ import annotations

import logging
from pathlib import Path

import sass

from theme_tasks.errors import ActionError
from theme_tasks.tasks.models import CompileStyles

logger = logging.getLogger(__name__)


def compile_styles(action: CompileStyles) -> list[Path]:
    """Compile each source into ``destination/<stem><output_extension>``.

    Partials (file names starting with ``_``) are only compiled through
    imports from other sources.
    """

    sources = sorted(
        path
        for path in action.source_dir.glob(action.source_glob)
        if path.is_file() and not path.name.startswith("_")
    )
    if not sources:
        logger.warning("No style sources match %s in %s", action.source_glob, action.source_dir)
        return []

    include_paths = [str(path) for path in action.include_paths]
    written: list[Path] = []
    for source in sources:
        try:
            css = sass.compile(
                filename=str(source),
                output_style=action.output_style,
                include_paths=include_paths,
            )
        except sass.CompileError as error:
            raise ActionError(f"Sass compilation failed for {source.name}: {error}") from error

        target = action.destination / f"{source.stem}{action.output_extension}"
        try:
            action.destination.mkdir(parents=True, exist_ok=True)
            target.write_text(css, "utf-8")
        except OSError as error:
            raise ActionError(f"Failed to write {target}: {error}") from error
        written.append(target)
        logger.debug("Compiled %s -> %s (%s)", source.name, target.name, action.output_style)

    logger.info(
        "Compiled %d style sheet(s) to %s (%s)",
        len(written),
        action.destination,
        action.output_style,
    )
    return written
