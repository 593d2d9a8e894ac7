"""
Pattern matching primitives for policy rules.

A pattern is compared against one request attribute:

- ""  or "*"  match anything
- "-"         matches only an empty value
- "prefix*"   matches values starting with "prefix"
- "a, b, c"   matches if any element matches; a trailing "*" takes
              precedence, so "a*, b*" is a single prefix pattern
- otherwise   exact equality
"""

from typing import Iterable, List


def match_pattern(pattern: str, value: str) -> bool:
    """Match a single pattern against a value."""
    pattern = pattern.strip()
    if pattern == "":
        return True
    elif pattern == "*":
        return True
    elif pattern == "-" and value == "":
        return True
    # "-" against a non-empty value falls through, so a literal "-" still matches exactly
    elif pattern.endswith("*"):
        return value.startswith(pattern.rstrip("*"))
    elif pattern == value:
        return True
    elif "," in pattern:
        return match_with_pattern_array(value, split_rule(pattern))
    else:
        return False


def match_pattern_with_array(pattern: str, values: Iterable[str]) -> bool:
    """True if the pattern matches any of the values."""
    for value in values:
        if match_pattern(pattern, value):
            return True
    return False


def match_with_pattern_array(value: str, patterns: Iterable[str]) -> bool:
    """True if any of the patterns matches the value."""
    for pattern in patterns:
        if match_pattern(pattern, value):
            return True
    return False


def split_rule(rules: str) -> List[str]:
    """Split a comma-separated rule into trimmed elements."""
    return [rule.strip() for rule in rules.split(",")]


def group_version(group: str, version: str) -> str:
    """Render an API group and version as "group/version" or "version"."""
    if group:
        return f"{group}/{version}"
    return version
