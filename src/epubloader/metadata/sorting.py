# ABOUTME: Sort-key derivation for titles, series, tags, and author names.
# ABOUTME: Moves leading articles to the end so catalog ordering follows reading order.

import re

# Leading articles moved to the end of a sort key ("The Hobbit" -> "Hobbit, The").
_ARTICLE_RE = re.compile(r"^(a|an|the)\s+(?=\S)", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def get_sort_string(text: str) -> str:
    """Derive the sort key for a display string.

    Whitespace runs are collapsed. A leading English article followed by more
    text is moved to the end after a comma. Equal inputs always give equal
    keys; strings without a leading article are returned collapsed but
    otherwise unchanged.
    """
    collapsed = _WHITESPACE_RE.sub(" ", text).strip()
    match = _ARTICLE_RE.match(collapsed)
    if match is None:
        return collapsed
    return f"{collapsed[match.end():]}, {match.group(1)}"


def author_sort_from_name(name: str) -> str:
    """Build a 'Last, First' filing form for an author display name.

    Names that already contain a comma, or consist of a single word, are
    returned as-is.
    """
    collapsed = _WHITESPACE_RE.sub(" ", name).strip()
    if "," in collapsed:
        return collapsed
    parts = collapsed.split(" ")
    if len(parts) < 2:
        return collapsed
    return f"{parts[-1]}, {' '.join(parts[:-1])}"
