"""Annotation identity and the body marker that carries it between runs."""

import re

DELIMITER = "|"
MARKER_KEY = "fingerprint"

# Anchored per line; the marker block is always written last in the body.
_MARKER_RE = re.compile(rf"^[ \t]*{MARKER_KEY}=(.+)$", re.MULTILINE)


def fingerprint(source_path: str, text: str) -> str:
    """Return the identity for an annotation.

    The joined string itself is the identity, so it stays readable inside
    the issue body:

        fingerprint("src/x.ts", "Refactor later (see #42)")
        -> "src/x.ts|Refactor later (see #42)"

    A DELIMITER inside the path would make ("a|b", "x") and ("a", "b|x")
    collide, so the scanner skips such paths.
    """
    return f"{source_path}{DELIMITER}{text}"


def render_marker(value: str) -> str:
    return f"**CI_METADATA**\n```\n{MARKER_KEY}={value}\n```\n"


def extract_fingerprint(body: str | None) -> str | None:
    """Recover the identity written by render_marker, or None if there is none."""
    if not body:
        return None
    matches = _MARKER_RE.findall(body)
    if not matches:
        return None
    value = matches[-1].strip()
    return value or None
