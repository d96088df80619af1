"""
Evaluator service: rule management and batch evaluation over HTTP.
"""

from typing import List

from fastapi import Query, Request

from shared.base_service import BaseService
from shared.errors import ServiceException, ValidationError
from shared.tracing import add_span_event, trace_operation

from .repository import InMemoryRuleRepository
from .rules.codec import rule_from_wire, rule_to_wire
from .rules.engine import RuleEngine
from .rules.errors import RuleEvaluationError, RuleNotFoundError
from .rules.models import (
    EvaluationResponse, ReasonResponse, Rule, RuleDeleteResponse,
    RuleListResponse, RuleRequest, RuleResponse
)
from .rules.values import to_value


def parse_rule_ids(raw: str) -> List[str]:
    """Split a comma-separated rule id list, dropping blank entries."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _rule_response(rule: Rule) -> RuleResponse:
    return RuleResponse(**rule_to_wire(rule))


class EvaluatorService(BaseService):
    """Evaluator service implementation."""

    def __init__(self, **config_overrides):
        super().__init__("evaluator", **config_overrides)

        self.rule_engine = RuleEngine()
        self.repository = InMemoryRuleRepository()

        if self.config.rules_file:
            count = self.repository.load_file(self.config.rules_file)
            self.logger.info("Rules loaded from file", path=self.config.rules_file, count=count)
        self._update_rule_gauge()

        self._setup_evaluator_routes()

    def _update_rule_gauge(self):
        self.metrics.set_gauge("rules_loaded", len(self.repository))

    def _record_mutation(self, operation: str):
        self.metrics.increment_counter("rule_operations_total", operation=operation)
        self._update_rule_gauge()

    def _setup_evaluator_routes(self):
        """Set up evaluator-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "evaluator",
                "message": "Rule Evaluator Service",
                "version": "1.0.0",
                "capabilities": ["rule_engine", "rule_management"]
            }

        @self.app.get("/rules", response_model=RuleListResponse)
        async def list_rules():
            """List every stored rule."""
            rules = self.repository.get_all()
            return RuleListResponse(
                rules=[_rule_response(rule) for rule in rules],
                total=len(rules)
            )

        @self.app.post("/rules", response_model=RuleResponse, status_code=201)
        async def create_rule(request: RuleRequest):
            """Create a new rule."""
            rule = rule_from_wire(request.model_dump())
            self.repository.create(rule)
            self._record_mutation("create")
            return _rule_response(rule)

        @self.app.get("/rules/{rule_id}", response_model=RuleResponse)
        async def get_rule(rule_id: str):
            """Get a rule by id."""
            return _rule_response(self.repository.get(rule_id))

        @self.app.put("/rules/{rule_id}", response_model=RuleResponse)
        async def update_rule(rule_id: str, request: RuleRequest):
            """Replace an existing rule."""
            rule = rule_from_wire(request.model_dump())
            self.repository.update(rule_id, rule)
            self._record_mutation("update")
            return _rule_response(rule)

        @self.app.delete("/rules/{rule_id}", response_model=RuleDeleteResponse)
        async def delete_rule(rule_id: str):
            """Delete a rule. Deleting an unknown id succeeds."""
            removed = self.repository.delete(rule_id)
            self._record_mutation("delete")
            return RuleDeleteResponse(
                success=True,
                deleted=_rule_response(removed) if removed is not None else None
            )

        @self.app.post("/evaluate", response_model=EvaluationResponse)
        async def evaluate(
            request: Request,
            rules: str = Query(..., description="Comma-separated rule ids")
        ):
            """Evaluate the named rules, in order, against the request body."""
            rule_ids = parse_rule_ids(rules)

            try:
                document = to_value(await request.json())
            except ValueError as exc:
                raise ValidationError(f"invalid input document: {exc}") from exc

            try:
                batch = self.repository.get_many(rule_ids)
            except RuleNotFoundError as exc:
                self.metrics.increment_counter("rule_evaluations_total", result="ERROR")
                raise ServiceException(exc.code, exc.message, exc.details, status_code=400) from exc

            with trace_operation("evaluate_rules", rule_count=len(batch)):
                try:
                    with self.metrics.time_operation("rule_evaluation_duration_seconds"):
                        outcome = self.rule_engine.evaluate_batch(batch, document)
                except RuleEvaluationError as exc:
                    self.metrics.increment_counter("rule_evaluations_total", result="ERROR")
                    add_span_event("rule_evaluation_failed", rule_id=exc.rule_id)
                    raise

            self.metrics.increment_counter("rule_evaluations_total", result=outcome.result.value)
            self.logger.info(
                "Rules evaluated",
                rule_ids=rule_ids,
                result=outcome.result.value,
                evaluation_time_ms=round(outcome.evaluation_time_ms, 3)
            )

            return EvaluationResponse(
                result=outcome.result,
                reasons=[
                    ReasonResponse(
                        rule=reason.rule_id,
                        requirement=reason.message,
                        evaluation=reason.evaluation
                    )
                    for reason in outcome.reasons
                ]
            )

        @self.app.get("/stats")
        async def get_stats():
            """Get evaluator service statistics."""
            return {"repository": self.repository.stats()}

    async def _check_dependencies(self):
        """The rule store lives in-process."""
        return {"repository": "ok"}


def create_app(**config_overrides):
    """Create evaluator service application."""
    service = EvaluatorService(**config_overrides)
    return service.app


if __name__ == "__main__":
    service = EvaluatorService()
    service.run()
