"""
Rules engine package.

Defines the value model, field paths, operators, predicate trees and the
evaluation engine used by the Evaluator Service. Evaluation is a pure,
stateless tree walk: it returns a boolean verdict or raises a typed
evaluation error, and never touches shared state.

Modules of interest:
- values: JSON value classification and type-exact deep equality.
- paths: Dotted field paths and their resolution against a document.
- operators: The closed operator set and its type-checked application.
- models: Predicate tree, Rule, Reason and the API request/response models.
- codec: JSON wire encoding of predicates and rules.
- engine: Predicate evaluation and batch aggregation.
"""
