"""
In-memory rule repository for the Evaluator Service.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from shared.logging import get_logger
from ..rules.codec import rules_from_wire
from ..rules.errors import DuplicateRuleError, RuleNotFoundError
from ..rules.models import Rule


class InMemoryRuleRepository:
    """Copy-on-write map of rules keyed by id.

    Writers serialize on a lock, build a new dict and swap it in with a
    single assignment. Readers grab the current dict without locking, so
    every read sees one complete snapshot. A writer that raises leaves the
    published dict untouched and the lock released.
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self.logger = get_logger("evaluator.repository")
        self._write_lock = threading.Lock()
        self._rules: Dict[str, Rule] = {}
        if rules:
            self.load(rules)

    def _snapshot(self) -> Dict[str, Rule]:
        return self._rules

    def get_all(self) -> List[Rule]:
        """Return every rule, ordered by id."""
        snapshot = self._snapshot()
        return [snapshot[rule_id] for rule_id in sorted(snapshot)]

    def get(self, rule_id: str) -> Rule:
        """Get a rule by id."""
        rule = self._snapshot().get(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def get_many(self, rule_ids: Sequence[str]) -> List[Rule]:
        """Get several rules from one snapshot, in the order requested."""
        snapshot = self._snapshot()
        rules = []
        for rule_id in rule_ids:
            rule = snapshot.get(rule_id)
            if rule is None:
                raise RuleNotFoundError(rule_id)
            rules.append(rule)
        return rules

    def create(self, rule: Rule) -> Rule:
        """Store a new rule."""
        with self._write_lock:
            if rule.rule_id in self._rules:
                raise DuplicateRuleError(rule.rule_id)
            rules = dict(self._rules)
            rules[rule.rule_id] = rule
            self._rules = rules

        self.logger.info("Rule created", rule_id=rule.rule_id)
        return rule

    def update(self, rule_id: str, rule: Rule) -> Rule:
        """Replace the rule stored under ``rule_id``; returns the old rule.

        The replacement may carry a different id, as long as that id is not
        already taken by another rule.
        """
        with self._write_lock:
            previous = self._rules.get(rule_id)
            if previous is None:
                raise RuleNotFoundError(rule_id)
            if rule.rule_id != rule_id and rule.rule_id in self._rules:
                raise DuplicateRuleError(rule.rule_id)
            rules = dict(self._rules)
            del rules[rule_id]
            rules[rule.rule_id] = rule
            self._rules = rules

        self.logger.info("Rule updated", rule_id=rule_id, new_rule_id=rule.rule_id)
        return previous

    def delete(self, rule_id: str) -> Optional[Rule]:
        """Remove a rule; deleting a missing id is not an error."""
        with self._write_lock:
            if rule_id not in self._rules:
                return None
            rules = dict(self._rules)
            removed = rules.pop(rule_id)
            self._rules = rules

        self.logger.info("Rule deleted", rule_id=rule_id)
        return removed

    def load(self, rules: Iterable[Rule]) -> int:
        """Add rules in bulk; all ids must be new. Returns the count added."""
        incoming = list(rules)
        with self._write_lock:
            merged = dict(self._rules)
            for rule in incoming:
                if rule.rule_id in merged:
                    raise DuplicateRuleError(rule.rule_id)
                merged[rule.rule_id] = rule
            self._rules = merged

        self.logger.info("Rules loaded", count=len(incoming))
        return len(incoming)

    def load_file(self, path: str) -> int:
        """Load a JSON array of rules from ``path``."""
        with Path(path).open("r", encoding="utf-8") as handle:
            data: Any = json.load(handle)
        return self.load(rules_from_wire(data))

    def stats(self) -> Dict[str, Any]:
        """Get repository statistics."""
        snapshot = self._snapshot()
        return {
            "total_rules": len(snapshot),
            "rule_ids": sorted(snapshot),
        }

    def __len__(self) -> int:
        return len(self._snapshot())
