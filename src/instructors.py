"""
Instructor name reconciliation.

Free-text instructor names arrive as "Dr. Marina Elliott", "elliot",
"J. Smith, PhD" ... The matcher is a heuristic: it compares normalized
surnames and tolerates a one-letter spelling variant.
"""

import re

_TITLE_RE = re.compile(r"^(dr\.?|professor|prof\.?|mrs\.?|mr\.?|ms\.?|miss)\s+", re.IGNORECASE)
_DEGREE_RE = re.compile(
    r",?\s+(ph\.?\s?d\.?|m\.?sc\.?|b\.?sc\.?|m\.?a\.?|b\.?a\.?)$",
    re.IGNORECASE,
)
_SPACE_RE = re.compile(r"\s+")


def normalize(name: str) -> str:
    """'Dr. Marina  Elliott, PhD' -> 'marina elliott'"""
    if not name:
        return ""
    cleaned = _SPACE_RE.sub(" ", name.strip())
    cleaned = _TITLE_RE.sub("", cleaned)
    cleaned = _DEGREE_RE.sub("", cleaned)
    return cleaned.strip().lower()


def names_match(a: str, b: str) -> bool:
    """Blank on either side means "any instructor" and always matches."""
    norm_a, norm_b = normalize(a), normalize(b)
    if not norm_a or not norm_b:
        return True
    if norm_a == norm_b:
        return True

    last_a, last_b = norm_a.split(" ")[-1], norm_b.split(" ")[-1]
    if last_a == last_b:
        return True

    # "elliot" vs "elliott"
    return abs(len(last_a) - len(last_b)) <= 1 and (last_a in last_b or last_b in last_a)
