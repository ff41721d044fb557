"""Validation and loading of the ignore_errors configuration"""

import logging
from typing import Any, Iterable, Optional

from .matching import IgnoreRule, RuleSet, has_misplaced_globstar, parse_rule
from .models import ValidationWarning

logger = logging.getLogger(__name__)

SOURCE = "ignore_errors"


def load_ignore_rules(
    raw: Any, known_analyzer_ids: Optional[Iterable[str]] = None
) -> tuple[dict[str, RuleSet], list[ValidationWarning]]:
    """Turn raw ignore_errors config into rule sets keyed by analyzer id.

    Every problem becomes a warning; malformed rules are dropped and never match.
    Pass ``known_analyzer_ids`` to also flag rule sets for analyzers that did not run.
    """
    warnings: list[ValidationWarning] = []
    rule_sets: dict[str, RuleSet] = {}

    if raw is None:
        return rule_sets, warnings
    if not isinstance(raw, dict):
        warnings.append(
            ValidationWarning(SOURCE, f"Invalid ignore_errors: expected a mapping of analyzer ids, got {type(raw).__name__}")
        )
        _log(warnings)
        return rule_sets, warnings

    known = set(known_analyzer_ids) if known_analyzer_ids is not None else None

    for analyzer_id, rules in raw.items():
        analyzer_id = str(analyzer_id)
        if known is not None and analyzer_id not in known:
            warnings.append(
                ValidationWarning(SOURCE, "Unknown analyzer id; these rules have no effect", analyzer_id)
            )

        if not isinstance(rules, list):
            warnings.append(
                ValidationWarning(
                    SOURCE,
                    f"Invalid rules: expected array (list) of rules, got {type(rules).__name__}",
                    analyzer_id,
                )
            )
            continue

        if not rules:
            warnings.append(
                ValidationWarning(SOURCE, "Empty rules list has no effect and should be removed", analyzer_id)
            )
            continue

        parsed: list[IgnoreRule] = []
        for index, raw_rule in enumerate(rules):
            rule, problems = parse_rule(raw_rule)
            for problem in problems:
                warnings.append(ValidationWarning(SOURCE, f"Rule #{index + 1}: {problem}", analyzer_id))

            pattern = raw_rule.get("path_pattern") if isinstance(raw_rule, dict) else None
            if isinstance(pattern, str) and has_misplaced_globstar(pattern):
                warnings.append(
                    ValidationWarning(
                        SOURCE,
                        f"Rule #{index + 1}: Invalid glob pattern '{pattern}': '**' should be "
                        "next to a '/' (e.g. 'app/**/file.php'); '*' already crosses directories",
                        analyzer_id,
                    )
                )

            if rule is not None:
                parsed.append(rule)

        rule_sets[analyzer_id] = RuleSet(tuple(parsed))

    _log(warnings)
    return rule_sets, warnings


def _log(warnings: list[ValidationWarning]) -> None:
    for warning in warnings:
        logger.warning("%s", warning)
