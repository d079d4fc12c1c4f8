"""Output file handling shared by the exporters."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from ..database.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def resolve_output_path(output_file: str | Path) -> Path:
    """Return the destination as a Path, rejecting blank names.

    Raises:
        InvalidArgumentError: If the name is empty or whitespace.
    """
    if not str(output_file).strip():
        raise InvalidArgumentError("Output file must be specified.")
    return Path(output_file)


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _staging_path(path: Path) -> Path:
    return path.with_name(path.name + ".part")


@contextlib.contextmanager
def open_for_export(
    output_file: str | Path,
    *,
    replace: bool = False,
) -> Iterator[tuple[TextIO, bool]]:
    """Open an export destination for UTF-8 text.

    A new or replaced file is written to a ``.part`` sibling and renamed
    over the destination only when the block completes, so a failed export
    leaves no partial file (and a replaced file untouched). Appending to a
    file that already holds data writes in place: rows written before a
    failure stay in the file.

    Yields:
        The open handle and whether the file already held data (in which
        case headers must not be written again).

    Side Effects:
        - Creates the parent directory if needed.
        - Replaces an existing file when ``replace`` is set.
    """
    path = resolve_output_path(output_file)
    _ensure_parent_dir(path)

    has_data = path.exists() and not replace
    if has_data:
        with open(path, "a", encoding="utf-8", newline="") as handle:
            yield handle, True
        return

    staging = _staging_path(path)
    try:
        with open(staging, "w", encoding="utf-8", newline="") as handle:
            yield handle, False
    except BaseException:
        staging.unlink(missing_ok=True)
        raise
    staging.replace(path)
    if replace:
        logger.debug("Replaced export file %s", path)


def write_text(output_file: str | Path, text: str) -> Path:
    """Write a whole document, overwriting any existing file."""
    path = resolve_output_path(output_file)
    _ensure_parent_dir(path)
    path.write_text(text, encoding="utf-8")
    return path
