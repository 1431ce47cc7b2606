"""Internal types for the rule registry."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from migraguard.diagnostics import Diagnostic, DiagnosticCode

Detector = Callable[[str], list[Diagnostic]]


@dataclass(frozen=True)
class Rule:
    name: str
    detect: Detector
    codes: frozenset[DiagnosticCode]


def check_ownership(rules: Sequence[Rule]) -> tuple[Rule, ...]:
    """Reject rule sets where two rules claim the same code."""
    owner: dict[DiagnosticCode, str] = {}
    for rule in rules:
        for code in rule.codes:
            if code in owner:
                raise ValueError(
                    f"code {code} is owned by both {owner[code]!r} and {rule.name!r}"
                )
            owner[code] = rule.name
    return tuple(rules)
