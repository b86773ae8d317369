"""URL slugs for posts and tags."""

import re

# Turkish letters are folded to ASCII before stripping.
_FOLD = str.maketrans({"ş": "s", "ğ": "g", "ü": "u", "ö": "o", "ç": "c", "ı": "i", " ": "-", "'": None})
_DISALLOWED = re.compile(r"[^a-z0-9\-]")
_DASH_RUNS = re.compile(r"-+")


def generate_slug(text: str) -> str:
    """
    Build a URL-friendly slug: lowercase, Turkish letters folded, spaces to
    dashes, everything outside [a-z0-9-] removed, dash runs collapsed and
    trimmed. May return an empty string for input with no usable characters.
    """
    slug = text.lower().translate(_FOLD)
    slug = _DISALLOWED.sub("", slug)
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-")
