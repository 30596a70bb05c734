"""
TokenLens - Consensus Aggregator
Weighted blend of independent sub-scores with explicit disagreement detection.
"""
from typing import Dict, List, Any, Optional
from datetime import datetime, timezone
import numpy as np

from tokenlens.config.settings import ConsensusSettings, get_settings
from tokenlens.scoring.base import (
    RiskLevel, ScoreResult, Sentiment, classify_band, risk_distance,
)
from tokenlens.utils.helpers import clamp, round_half_up
from tokenlens.utils.logger import get_logger

logger = get_logger("consensus")

# Pipeline weight variants; every variant sums to 1.0
WEIGHT_VARIANTS: Dict[str, Dict[str, float]] = {
    "swarm": {"research": 0.4, "market": 0.4, "contract": 0.2},
    "research": {"research": 0.4, "contract": 0.35, "market": 0.25},
}

RISK_CONFLICT_MIN_BANDS = 2

SUMMARIES = (
    (80, "Exceptional fundamentals with strong agreement across research, market and contract views."),
    (65, "Solid fundamentals with a favorable risk-reward profile."),
    (45, "Mixed signals that require careful evaluation; a neutral stance is recommended."),
    (25, "Multiple risk factors identified; high caution advised."),
    (0, "Severe risk indicators across the analysis; avoid exposure."),
)
INSUFFICIENT_SUMMARY = "Insufficient data to form a consensus; result is a neutral placeholder."


def summarize(score: int) -> str:
    """One-sentence executive summary for a score band."""
    for minimum, text in SUMMARIES:
        if score >= minimum:
            return text
    return SUMMARIES[-1][1]


def resolve_weights(variant: str, overrides: Optional[Dict[str, float]] = None) -> Dict[str, float]:
    """Explicit weights win over the named variant."""
    if overrides:
        return dict(overrides)
    if variant not in WEIGHT_VARIANTS:
        raise ValueError(f"Unknown consensus variant: {variant}")
    return dict(WEIGHT_VARIANTS[variant])


class ConsensusResult:
    """Final blended score with conflicts and attribution."""

    def __init__(
        self,
        consensus_score: int,
        confidence: float,
        findings: List[str],
        risks: List[str],
        conflicts: List[Dict[str, Any]],
        sub_scores: List[ScoreResult],
        insufficient_data: bool = False,
        variance: float = 0.0,
        summary: str = "",
    ):
        self.consensus_score = int(clamp(consensus_score, 0, 100))
        self.recommendation, self.risk_level = classify_band(self.consensus_score)
        self.confidence = max(0.0, min(1.0, confidence))
        self.findings = findings
        self.risks = risks
        self.conflicts = conflicts
        self.sub_scores = sub_scores
        self.insufficient_data = insufficient_data
        self.variance = variance
        self.summary = summary
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def included_tags(self) -> List[str]:
        return [s.tag for s in self.sub_scores if not s.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consensusScore": self.consensus_score,
            "recommendation": self.recommendation.value,
            "riskLevel": self.risk_level.value,
            "confidence": round(self.confidence, 2),
            "findings": self.findings,
            "risks": self.risks,
            "conflicts": self.conflicts,
            "insufficientData": self.insufficient_data,
            "variance": round(self.variance, 2),
            "summary": self.summary,
            "subScores": [s.to_dict() for s in self.sub_scores],
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return (f"ConsensusResult({self.consensus_score} {self.recommendation.value}/"
                f"{self.risk_level.value} @ {self.confidence:.2f})")


class ConsensusAggregator:
    """
    Renormalized weighted average over the sub-scores that succeeded.
    High variance between included scores costs a fixed penalty; named
    cross-checks (risk level, sentiment) add conflict records of their own.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None,
                 settings: Optional[ConsensusSettings] = None):
        self.settings = settings or get_settings().consensus
        self.weights = resolve_weights(
            self.settings.consensus_variant,
            weights if weights is not None else self.settings.consensus_weights,
        )

    def aggregate(self, sub_scores: List[ScoreResult]) -> ConsensusResult:
        included = [s for s in sub_scores if not s.failed and self.weights.get(s.tag, 0.0) > 0]
        if not included:
            return self._insufficient(sub_scores)

        total_weight = sum(self.weights[s.tag] for s in included)
        weighted = sum(s.score * self.weights[s.tag] for s in included) / total_weight
        score = int(clamp(round_half_up(weighted), 0, 100))
        confidence = float(np.mean([s.confidence for s in included]))

        conflicts: List[Dict[str, Any]] = []
        variance = float(np.var([s.score for s in included]))
        if variance > self.settings.variance_threshold:
            score = int(clamp(score - self.settings.variance_penalty, 0, 100))
            confidence -= self.settings.variance_confidence_penalty
            conflicts.append({
                "type": "score_variance",
                "variance": round(variance, 2),
                "scores": {s.tag: s.score for s in included},
            })
        conflicts.extend(self._cross_checks({s.tag: s for s in included}))

        findings = [f for s in included for f in s.findings][: self.settings.max_findings]
        risks = [r for s in included for r in s.risks][: self.settings.max_risks]

        result = ConsensusResult(
            consensus_score=score,
            confidence=confidence,
            findings=findings,
            risks=risks,
            conflicts=conflicts,
            sub_scores=sub_scores,
            variance=variance,
            summary=summarize(score),
        )
        logger.info(
            "consensus_aggregated",
            score=result.consensus_score,
            included=result.included_tags,
            variance=round(variance, 2),
            conflicts=[c["type"] for c in conflicts],
        )
        return result

    def _cross_checks(self, by_tag: Dict[str, ScoreResult]) -> List[Dict[str, Any]]:
        conflicts: List[Dict[str, Any]] = []

        research = by_tag.get("research")
        contract = by_tag.get("contract")
        if research and contract:
            research_risk: RiskLevel = research.risk_level
            contract_risk: RiskLevel = contract.risk_level
            if risk_distance(research_risk, contract_risk) >= RISK_CONFLICT_MIN_BANDS:
                conflicts.append({
                    "type": "risk_assessment",
                    "research_says": research_risk.value,
                    "contract_says": contract_risk.value,
                })

        market = by_tag.get("market")
        if research and market:
            research_sentiment = Sentiment.POSITIVE if research.score > 70 else Sentiment.NEGATIVE
            if market.sentiment != Sentiment.NEUTRAL and market.sentiment != research_sentiment:
                conflicts.append({
                    "type": "sentiment_mismatch",
                    "research_sentiment": research_sentiment.value,
                    "market_sentiment": market.sentiment.value,
                })

        return conflicts

    def _insufficient(self, sub_scores: List[ScoreResult]) -> ConsensusResult:
        logger.warning("consensus_insufficient_data",
                       failed=[f"{s.tag}:{s.reason}" for s in sub_scores])
        return ConsensusResult(
            consensus_score=self.settings.neutral_score,
            confidence=self.settings.insufficient_confidence,
            findings=[],
            risks=["Insufficient data: no scorer produced a result"],
            conflicts=[],
            sub_scores=sub_scores,
            insufficient_data=True,
            summary=INSUFFICIENT_SUMMARY,
        )
