"""
Rule storage for the Evaluator Service.

- memory: Thread-safe, copy-on-write in-memory repository keyed by rule id.
"""

from .memory import InMemoryRuleRepository

__all__ = ["InMemoryRuleRepository"]
