"""File copy and removal actions."""

from __future__ import annotations

import glob
import logging
import os
import shutil
from pathlib import Path

from theme_tasks.errors import ActionError
from theme_tasks.tasks.models import CopyAssets, RemovePaths

logger = logging.getLogger(__name__)


def copy_assets(action: CopyAssets) -> list[Path]:
    """Copy matches flat into the destination; later duplicates overwrite earlier ones."""

    matches = sorted(glob.glob(action.source_glob))
    if not matches:
        logger.warning("No files match %s", action.source_glob)

    copied: list[Path] = []
    for match in matches:
        source = Path(match)
        if action.files_only and not source.is_file():
            continue
        target = action.destination / source.name
        try:
            action.destination.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as error:
            raise ActionError(f"Failed to copy {source} to {target}: {error}") from error
        copied.append(target)

    logger.info("Copied %d file(s) to %s", len(copied), action.destination)
    return copied


def remove_paths(action: RemovePaths, *, working_dir: Path) -> list[Path]:
    """Remove targets; missing ones are skipped, not reported as errors."""

    removed: list[Path] = []
    for target in action.targets:
        if not target.exists() and not target.is_symlink():
            logger.debug("Nothing to remove at %s", target)
            continue
        if not action.force:
            _ensure_inside(target, working_dir)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as error:
            raise ActionError(f"Failed to remove {target}: {error}") from error
        removed.append(target)
        logger.info("Removed %s", target)
    return removed


def _ensure_inside(target: Path, working_dir: Path) -> None:
    resolved = Path(os.path.realpath(target))
    root = Path(os.path.realpath(working_dir))
    if resolved == root:
        raise ActionError(f"Refusing to remove the working directory {root}.")
    if root not in resolved.parents:
        raise ActionError(
            f"Refusing to remove {resolved} outside the working directory {root}; "
            "enable force to allow it.",
        )
