"""Confluence tag normalization.

Tags arrive as a free-form comma-delimited string.  They are normalized
once, when a trade record is built, into a sorted de-duplicated tuple;
every aggregation level then reuses that tuple.
"""

from __future__ import annotations

from collections.abc import Iterable

NO_CONFLUENCE_LABEL = "No Confluences"
COMBO_SEPARATOR = " + "

# Explicit "no confluences" markers written by the journal form
NO_CONFLUENCE_MARKERS = frozenset({"#semconfluencias", "#noconfluences"})


def normalize_tags(raw: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split, trim, de-duplicate and sort tags into a canonical tuple.

    >>> normalize_tags(" FVG, OB ,FVG,,")
    ('FVG', 'OB')

    Raises:
        ValueError: ``raw`` is neither a string nor an iterable of strings.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        parts = raw.split(",")
    else:
        try:
            parts = list(raw)
        except TypeError as exc:
            raise ValueError(
                f"tags must be a string or a list of strings, got {type(raw).__name__}"
            ) from exc
        if not all(isinstance(p, str) for p in parts):
            raise ValueError("tags must be a string or a list of strings")
    cleaned = {
        p.strip()
        for p in parts
        if p and p.strip() and p.strip().lower() not in NO_CONFLUENCE_MARKERS
    }
    return tuple(sorted(cleaned))


def tag_combo_label(
    tags: tuple[str, ...],
    empty_label: str = NO_CONFLUENCE_LABEL,
) -> str:
    """Join a normalized tag tuple into one combo label."""
    if not tags:
        return empty_label
    return COMBO_SEPARATOR.join(tags)
