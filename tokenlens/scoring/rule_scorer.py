"""
TokenLens - Rule Scorer
Primary deterministic score: the sum of every rule's contribution, clamped to [0, 100].
"""
from typing import Dict, List, Optional

from tokenlens.data.models import CanonicalMetrics, DataSource, TokenInfo
from tokenlens.scoring.base import BaseScorer, ScoreResult
from tokenlens.scoring.rules import BaseRule, RuleOutcome, default_rules
from tokenlens.utils.logger import get_logger

logger = get_logger("rule_scorer")

NO_DATA_CONFIDENCE = 0.3
BASE_CONFIDENCE = 0.5
CONFIDENCE_STEP = 0.1
MAX_CONFIDENCE = 0.9


class RuleScorer(BaseScorer):
    """Ordered registry of independent rules."""

    def __init__(self, rules: Optional[List[BaseRule]] = None):
        super().__init__(tag="rules")
        self._rules: Dict[str, BaseRule] = {}
        for rule in rules if rules is not None else default_rules():
            self.register(rule)

    def register(self, rule: BaseRule) -> None:
        self._rules[rule.name] = rule

    @property
    def rule_names(self) -> List[str]:
        return list(self._rules.keys())

    def evaluate_rules(self, metrics: CanonicalMetrics) -> Dict[str, RuleOutcome]:
        return {name: rule.evaluate(metrics) for name, rule in self._rules.items()}

    def score(self, metrics: CanonicalMetrics) -> ScoreResult:
        outcomes = self.evaluate_rules(metrics)

        total = 0
        findings: List[str] = []
        risks: List[str] = []
        for outcome in outcomes.values():
            total += outcome.points
            findings.extend(outcome.findings)
            risks.extend(outcome.risks)

        result = ScoreResult(
            tag=self.tag,
            score=total,
            findings=findings,
            risks=risks,
            confidence=self.confidence_for(metrics),
        )
        logger.info(
            "rules_scored",
            score=result.score,
            raw_total=total,
            contributions={name: o.points for name, o in outcomes.items()},
        )
        return result

    def evaluate(self, metrics: CanonicalMetrics, token_info: Optional[TokenInfo] = None) -> ScoreResult:
        return self.score(metrics)

    @staticmethod
    def confidence_for(metrics: CanonicalMetrics) -> float:
        """Confidence grows with the number of corroborating providers."""
        if not metrics.has_data:
            return NO_DATA_CONFIDENCE
        market_sources = [s for s in metrics.data_sources_used if s != DataSource.SOLANA_TRACKER.value]
        confidence = BASE_CONFIDENCE + CONFIDENCE_STEP * max(0, len(market_sources) - 1)
        if metrics.trader_performance is not None:
            confidence += CONFIDENCE_STEP
        return round(min(MAX_CONFIDENCE, confidence), 2)
