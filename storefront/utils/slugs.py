"""Profile slug helpers.

Slugs take the form ``{first-name}-single-{nationality}`` and become unique by
appending ``-2``, ``-3`` and so on.
"""

from __future__ import annotations

import re
from collections.abc import Collection

DEFAULT_NATIONALITY = "dominican"

# Checked in order; the first substring found in the lower-cased location wins.
_NATIONALITY_BY_COUNTRY: tuple[tuple[str, str], ...] = (
    ("dominican republic", "dominican"),
    ("dominican", "dominican"),
    ("colombia", "colombian"),
    ("venezuela", "venezuelan"),
    ("brazil", "brazilian"),
    ("mexico", "mexican"),
    ("puerto rico", "puerto-rican"),
    ("cuba", "cuban"),
)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_NUMERIC_ID = re.compile(r"^\d+$")


def nationality_from_location(location: str) -> str:
    """Map a free-form location such as ``"Santiago, DO"`` to a nationality."""

    # Country codes only match as whole, upper-case tokens.
    tokens = {token.strip() for token in re.split(r"[,\s]+", location) if token}
    if "DO" in tokens:
        return "dominican"

    lowered = location.lower()
    for country, nationality in _NATIONALITY_BY_COUNTRY:
        if country in lowered:
            return nationality
    return DEFAULT_NATIONALITY


def slugify(value: str) -> str:
    return _NON_SLUG_CHARS.sub("-", value.lower()).strip("-")


def generate_profile_slug(name: str, location: str) -> str:
    first_name = slugify(name.split()[0]) if name.strip() else "profile"
    return f"{first_name or 'profile'}-single-{nationality_from_location(location)}"


def ensure_unique_slug(base_slug: str, existing_slugs: Collection[str]) -> str:
    slug = base_slug
    counter = 2
    while slug in existing_slugs:
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def parse_profile_identifier(identifier: str | int) -> int | str:
    """Return an ``int`` id for numeric identifiers, otherwise the slug string."""

    if isinstance(identifier, int):
        return identifier
    cleaned = identifier.strip()
    if _NUMERIC_ID.match(cleaned):
        return int(cleaned)
    return cleaned.lower()


__all__ = [
    "DEFAULT_NATIONALITY",
    "ensure_unique_slug",
    "generate_profile_slug",
    "nationality_from_location",
    "parse_profile_identifier",
    "slugify",
]
