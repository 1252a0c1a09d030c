"""Decide which scanned annotations still need an issue."""

from collections.abc import Iterable, Set

from todo2issue.models import Annotation


def reconcile(scanned: Iterable[Annotation], existing: Set[str]) -> list[Annotation]:
    """Return annotations whose fingerprint is not in `existing`, in scan order.

    Repeats of an identity within the same scan collapse onto the first
    occurrence (same text twice in one file means one issue).
    """
    selected: list[Annotation] = []
    taken: set[str] = set()
    for annotation in scanned:
        key = annotation.fingerprint
        if key in existing or key in taken:
            continue
        taken.add(key)
        selected.append(annotation)
    return selected
