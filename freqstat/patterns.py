from __future__ import annotations

"""Named pattern presets.

When a pattern has a capturing group, the first group is the counted key
(e.g. ``first_letter`` counts the first letter of each word).
"""

from typing import Dict, List

PATTERNS: Dict[str, str] = {
    "letter_chars": r"[a-z]",
    "letter_digraphs": r"[a-z]{2,2}",
    "letter_trigraphs": r"[a-z]{3,3}",
    "main30_chars": r"[a-z.,;']",
    "main30_digraphs": r"[a-z.,;']{2,2}",
    "main30_trigraphs": r"[a-z.,;']{3,3}",
    "digraphs_nospc": "[^\n\t ]{2,2}",
    "chars": r".",
    "digraphs": r"..",
    "trigraphs": r"...",
    # a word cannot have ' at beginning or end
    "words": r"((([a-z])+('[a-z])?)+)",
    "numbers": r"((\+|-)?[0-9]+(\.[0-9]+)?((e|E)[0-9]+)?)",
    "first_letter": r"([a-z])[a-z]*",
    "second_letter": r"[a-z]([a-z])[a-z]*",
    "third_letter": r"[a-z]{2,2}([a-z])[a-z]*",
    "last_letter": r"[a-z]*([a-z])",
    "first_digraph": r"([a-z]{2,2})[a-z]*",
    "last_digraph": r"[a-z]*([a-z]{2,2})",
}


def list_patterns() -> List[str]:
    return sorted(PATTERNS.keys())


def resolve_pattern(name_or_regex: str) -> str:
    """Return the preset named ``name_or_regex``, or the argument as a raw regex."""
    return PATTERNS.get(name_or_regex, name_or_regex)


def detect_overlap(pattern: str) -> bool:
    """Fixed-length patterns overlap; ``+`` or ``*`` make a pattern variable-length."""
    return "+" not in pattern and "*" not in pattern
