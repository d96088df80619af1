"""
Evaluator Service package.

This package evaluates named rules against arbitrary JSON documents and
reports a PASS/FAIL verdict with one reason per rule. It provides:

- app.main: API surface for rule management, evaluation and health.
- app.rules: Value model, field paths, operators, predicates and the engine.
- app.repository: Thread-safe in-memory rule storage.

Guidelines:
- Evaluation is pure computation; it never mutates shared state.
- A rule that cannot be evaluated fails the whole batch; nothing is guessed.
"""
