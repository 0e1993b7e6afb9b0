"""Helpers shared by repository search queries."""

LIKE_ESCAPE = "\\"


def contains_pattern(query: str) -> str:
    """Build a LIKE pattern matching `query` as a literal substring.

    Wildcards in the user's query are escaped so "50%" matches the text
    "50%" and not "50 anything".
    """
    escaped = (
        query.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"
