"""
Rule matching shared by configured ignore rules and pattern baseline entries.

A rule is parsed once from a loosely-typed mapping into a tuple of criteria.
Every criterion must hold for the rule to match (AND); a rule set matches when
any of its rules does (OR). Fields absent from the raw rule simply produce no
criterion, so they match anything.
"""

import fnmatch
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Union

from .models import Issue

RULE_KEYS = frozenset({"path", "path_pattern", "message", "message_pattern"})

# When both forms of a field are given, the pattern form decides the match.
_PRECEDENCE = (("path", "path_pattern"), ("message", "message_pattern"))


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


@lru_cache(maxsize=256)
def _wildcard_regex(pattern: str) -> re.Pattern:
    parts = (re.escape(chunk) for chunk in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


def wildcard_match(pattern: str, text: str) -> bool:
    """Case-sensitive match where only '*' is special"""
    return _wildcard_regex(pattern).fullmatch(text) is not None


def has_misplaced_globstar(pattern: str) -> bool:
    """True when a '**' is not bounded by '/' or the ends of the pattern"""
    for match in re.finditer(r"\*\*+", pattern):
        before = pattern[match.start() - 1] if match.start() > 0 else "/"
        after = pattern[match.end()] if match.end() < len(pattern) else "/"
        if before != "/" or after != "/":
            return True
    return False


@dataclass(frozen=True)
class PathEquals:
    path: str

    def matches(self, issue: Issue) -> bool:
        if not issue.targetable:
            return False
        return normalize_path(issue.location.file) == normalize_path(self.path)


@dataclass(frozen=True)
class PathGlob:
    pattern: str

    def matches(self, issue: Issue) -> bool:
        if not issue.targetable:
            return False
        raw = issue.location.file
        return fnmatch.fnmatchcase(raw, self.pattern) or fnmatch.fnmatchcase(
            normalize_path(raw), self.pattern
        )


@dataclass(frozen=True)
class MessageEquals:
    message: str

    def matches(self, issue: Issue) -> bool:
        return issue.message == self.message


@dataclass(frozen=True)
class MessageWildcard:
    pattern: str

    def matches(self, issue: Issue) -> bool:
        # Recommendations often carry the detail (e.g. appended tool output)
        return wildcard_match(self.pattern, issue.message) or wildcard_match(
            self.pattern, issue.recommendation
        )


Criterion = Union[PathEquals, PathGlob, MessageEquals, MessageWildcard]

_CRITERIA = {
    "path": PathEquals,
    "path_pattern": PathGlob,
    "message": MessageEquals,
    "message_pattern": MessageWildcard,
}


@dataclass(frozen=True)
class IgnoreRule:
    criteria: tuple[Criterion, ...]

    def matches(self, issue: Issue) -> bool:
        return all(criterion.matches(issue) for criterion in self.criteria)


@dataclass(frozen=True)
class RuleSet:
    rules: tuple[IgnoreRule, ...] = ()

    def matches(self, issue: Issue) -> bool:
        return any(rule.matches(issue) for rule in self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def parse_rule(
    raw: Any, allowed_keys: Iterable[str] = RULE_KEYS
) -> tuple[IgnoreRule | None, list[str]]:
    """Parse one raw rule mapping.

    Returns the rule (or None when it has no usable criteria) together with a
    list of human-readable problems. Never raises.
    """
    if not isinstance(raw, dict):
        return None, [f"Invalid rule: expected array of criteria, got {type(raw).__name__}"]

    problems: list[str] = []
    allowed = set(allowed_keys) | RULE_KEYS
    unknown = sorted(str(key) for key in raw if key not in allowed)
    if unknown:
        problems.append(
            f"Invalid keys {', '.join(unknown)}; allowed keys are {', '.join(sorted(RULE_KEYS))}"
        )

    values: dict[str, str] = {}
    for key in _CRITERIA:
        if key not in raw:
            continue
        value = raw[key]
        if not isinstance(value, str):
            problems.append(f"Value for '{key}' must be a string, got {type(value).__name__}")
            continue
        values[key] = value

    for exact, pattern in _PRECEDENCE:
        if exact in values and pattern in values:
            problems.append(
                f"Conflicting keys '{exact}' and '{pattern}'; '{pattern}' takes precedence"
            )
            del values[exact]

    if not values:
        problems.append("Empty rule: at least one of path, path_pattern, message, message_pattern is required")
        return None, problems

    criteria = tuple(_CRITERIA[key](value) for key, value in values.items())
    return IgnoreRule(criteria), problems


def matches(issue: Issue, rules: Iterable[IgnoreRule]) -> bool:
    return any(rule.matches(issue) for rule in rules)
