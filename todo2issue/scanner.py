"""Walk a source tree and pull out TODO annotations."""

import logging
import os
import re
from pathlib import Path

from todo2issue.fingerprint import DELIMITER
from todo2issue.models import Annotation

logger = logging.getLogger(__name__)

# Pruned by name at any depth; nothing below them is read.
EXCLUDED_DIRS = frozenset(
    {
        # version control
        ".git",
        ".hg",
        ".svn",
        # CI configuration
        ".github",
        ".circleci",
        ".gitlab",
        "git_hooks",
        "infra",
        # editor / IDE
        ".cursor",
        ".vscode",
        ".idea",
        # dependency caches
        "node_modules",
        "vendor",
        ".venv",
        "venv",
        "__pycache__",
        ".tox",
        ".nox",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".wrangler",
        # build / output / coverage
        "build",
        "dist",
        "out",
        "bin",
        "coverage",
        "htmlcov",
        ".next",
    }
)

# Comment opener (incl. /** and /*!), "TODO:", then the payload up to a block/markup closer or EOL.
TODO_PATTERN = re.compile(
    r"(?://|#|/\*[*!]?|<!--)\s*TODO:\s*(?P<text>.*?)\s*(?:\*/|-->|$)",
    re.IGNORECASE,
)


def extract_annotation(line: str) -> str | None:
    """Return the trimmed TODO payload on this line, or None."""
    match = TODO_PATTERN.search(line)
    if not match:
        return None
    text = match.group("text").strip()
    return text or None


def _read_text(path: Path) -> str | None:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None
    if b"\x00" in raw:
        logger.warning("Skipping binary file %s", path)
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Skipping non-text file %s: %s", path, exc)
        return None


def _on_walk_error(exc: OSError) -> None:
    logger.warning("Could not list %s: %s", exc.filename, exc.strerror or exc)


def scan_file(path: Path, source_path: str) -> list[Annotation]:
    content = _read_text(path)
    if content is None:
        return []
    found = []
    # Only \n ends a line; splitlines() would also break on \x0c, \u2028 and friends
    for index, line in enumerate(content.split("\n")):
        line = line.removesuffix("\r")
        text = extract_annotation(line)
        if text is not None:
            found.append(Annotation(source_path=source_path, text=text, line_number=index + 1))
    return found


def scan_annotations(root: Path) -> list[Annotation]:
    """Scan every readable file under root, skipping EXCLUDED_DIRS.

    Traversal is sorted, so the same tree always yields the same order.
    """
    root = Path(root)
    annotations: list[Annotation] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        # Prune in place so os.walk never descends into excluded directories
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.is_dir():
                continue
            source_path = path.relative_to(root).as_posix()
            if DELIMITER in source_path:
                logger.warning("Skipping %s: '%s' in the path would make its fingerprints ambiguous", path, DELIMITER)
                continue
            annotations.extend(scan_file(path, source_path))
    logger.debug("Scanned %s: %d annotation(s)", root, len(annotations))
    return annotations
