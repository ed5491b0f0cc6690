from __future__ import annotations

import unicodedata


def fold(text: str | None) -> str:
    """Strip accents and case so "Estagiário" and "estagiario" compare equal."""

    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold().strip()


def sort_key(name: str | None) -> tuple[str, str]:
    """Collation key for display names; ties fall back to the raw text."""

    raw = name or ""
    return fold(raw), raw


def contains_any(text: str | None, keywords: list[str]) -> bool:
    folded = fold(text)
    needles = [fold(keyword) for keyword in keywords]
    return any(needle and needle in folded for needle in needles)
