import re

PLACEHOLDER_NAME = "unnamed"

_DISALLOWED = re.compile(r"[^a-z0-9_-]", re.IGNORECASE | re.ASCII)


def sanitize(name: str | None) -> str:
    """Map a name onto `[a-z0-9_-]`, replacing everything else with `_`."""
    if not name:
        return PLACEHOLDER_NAME
    return _DISALLOWED.sub("_", name).lower()


def archive_filename(document_name: str) -> str:
    return f"{document_name}.zip"
