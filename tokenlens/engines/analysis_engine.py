"""
TokenLens - Token Analysis Engine
Runs the full pipeline for one token identifier:
provider fan-out -> reconciliation -> rule score -> (optional) consensus.
"""
import asyncio
from typing import Dict, List, Any, Optional

from tokenlens.data.gateway import ProviderGateway
from tokenlens.data.chain import detect_chain, resolve_token_info
from tokenlens.data.models import CanonicalMetrics, TokenInfo
from tokenlens.engines.reconciler import MetricReconciler
from tokenlens.engines.consensus import ConsensusAggregator, ConsensusResult, summarize
from tokenlens.scoring.base import BaseScorer, ScoreResult
from tokenlens.scoring.rule_scorer import RuleScorer
from tokenlens.scoring.sub_scorers import default_sub_scorers
from tokenlens.config.settings import get_settings
from tokenlens.utils.logger import bind_analysis_context, get_logger
from tokenlens.utils.helpers import utc_timestamp

logger = get_logger("analysis_engine")

MAX_TOKEN_INPUT_LENGTH = 128
ANALYSIS_MODES = ("consensus", "rules")


class InvalidTokenInput(ValueError):
    """Token identifier is missing, blank or malformed."""


def validate_token_input(token_input: Any) -> str:
    if not isinstance(token_input, str) or not token_input.strip():
        raise InvalidTokenInput("Token input is required")
    token = token_input.strip()
    if len(token) > MAX_TOKEN_INPUT_LENGTH:
        raise InvalidTokenInput(f"Token input exceeds {MAX_TOKEN_INPUT_LENGTH} characters")
    return token


class AnalysisResult:
    """Formatted outcome of one analysis run."""

    def __init__(
        self,
        token: str,
        mode: str,
        metrics: CanonicalMetrics,
        token_info: TokenInfo,
        primary: ScoreResult,
        consensus: ConsensusResult,
    ):
        self.token = token
        self.mode = mode
        self.metrics = metrics
        self.token_info = token_info
        self.primary = primary
        self.consensus = consensus
        self.timestamp = utc_timestamp()

    def to_dict(self) -> Dict[str, Any]:
        c = self.consensus
        return {
            "consensusScore": c.consensus_score,
            "recommendation": c.recommendation.value,
            "riskLevel": c.risk_level.value,
            "confidence": round(c.confidence, 2),
            "findings": c.findings,
            "risks": c.risks,
            "conflicts": c.conflicts,
            "insufficientData": c.insufficient_data,
            "summary": c.summary,
            "primaryScore": self.primary.to_dict(),
            "subScores": [s.to_dict() for s in c.sub_scores],
            "keyMetrics": self.metrics.to_dict(),
            "tokenInfo": self.token_info.to_dict(),
            "sourceAttribution": {
                "primarySource": self.metrics.primary_source,
                "dataSourcesUsed": list(self.metrics.data_sources_used),
            },
            "mode": self.mode,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return (f"AnalysisResult({self.token}: {self.consensus.consensus_score} "
                f"{self.consensus.recommendation.value} via {self.metrics.primary_source})")


class TokenAnalysisEngine:
    """
    Stateless per run: every call builds its own payloads, metrics and
    scores. Only InvalidTokenInput escapes; data problems degrade to a
    low-confidence result.
    """

    def __init__(
        self,
        gateway: Optional[ProviderGateway] = None,
        reconciler: Optional[MetricReconciler] = None,
        rule_scorer: Optional[RuleScorer] = None,
        sub_scorers: Optional[List[BaseScorer]] = None,
        aggregator: Optional[ConsensusAggregator] = None,
    ):
        self.settings = get_settings()
        self.gateway = gateway or ProviderGateway()
        self.reconciler = reconciler or MetricReconciler()
        self.rule_scorer = rule_scorer or RuleScorer()
        self.sub_scorers = sub_scorers if sub_scorers is not None else default_sub_scorers()
        self.aggregator = aggregator or ConsensusAggregator()

    async def initialize(self) -> None:
        await self.gateway.initialize()

    async def shutdown(self) -> None:
        await self.gateway.shutdown()

    async def analyze(self, token_input: str, mode: Optional[str] = None) -> AnalysisResult:
        token = validate_token_input(token_input)
        mode = mode or self.settings.analysis_mode
        if mode not in ANALYSIS_MODES:
            raise InvalidTokenInput(f"Unknown analysis mode: {mode}")

        bind_analysis_context(token, mode)
        logger.info("analysis_started")

        payloads = await self.gateway.fetch_all(token)
        snapshots = self.reconciler.normalize_all(payloads)
        chain_info = detect_chain(token, snapshots)
        token_info = resolve_token_info(token, snapshots, chain_info)
        metrics = self.reconciler.reconcile_snapshots(snapshots, chain_info, token)

        primary = self.rule_scorer.score(metrics)
        if mode == "consensus":
            sub_scores = await self._run_sub_scorers(metrics, token_info)
            consensus = self.aggregator.aggregate(sub_scores)
        else:
            consensus = self._from_primary(primary, metrics)

        result = AnalysisResult(token, mode, metrics, token_info, primary, consensus)
        logger.info(
            "analysis_complete",
            score=consensus.consensus_score,
            recommendation=consensus.recommendation.value,
            primary_source=metrics.primary_source,
            blockchain=chain_info.blockchain,
        )
        return result

    async def _run_sub_scorers(self, metrics: CanonicalMetrics, token_info: TokenInfo) -> List[ScoreResult]:
        """Run every sub-scorer concurrently; each failure or timeout is isolated."""
        timeout = self.settings.consensus.scorer_timeout_seconds
        results = await asyncio.gather(
            *(asyncio.wait_for(s.analyze(metrics, token_info), timeout=timeout) for s in self.sub_scorers),
            return_exceptions=True,
        )

        sub_scores: List[ScoreResult] = []
        for scorer, result in zip(self.sub_scorers, results):
            if isinstance(result, ScoreResult):
                if result.failed:
                    logger.warning("sub_scorer_failed", scorer=scorer.tag, reason=result.reason)
                sub_scores.append(result)
            elif isinstance(result, asyncio.TimeoutError):
                logger.warning("sub_scorer_timeout", scorer=scorer.tag, timeout=timeout)
                sub_scores.append(ScoreResult.failure(scorer.tag, "timeout"))
            else:
                logger.warning("sub_scorer_error", scorer=scorer.tag, error=str(result))
                sub_scores.append(ScoreResult.failure(scorer.tag, str(result)))
        return sub_scores

    def _from_primary(self, primary: ScoreResult, metrics: CanonicalMetrics) -> ConsensusResult:
        """Rules mode: the primary score is the final result, with the same shape."""
        limits = self.settings.consensus
        return ConsensusResult(
            consensus_score=primary.score,
            confidence=primary.confidence,
            findings=primary.findings[: limits.max_findings],
            risks=primary.risks[: limits.max_risks],
            conflicts=[],
            sub_scores=[],
            insufficient_data=not metrics.has_data,
            summary=summarize(primary.score),
        )


# Singleton
_engine: Optional[TokenAnalysisEngine] = None


def get_analysis_engine() -> TokenAnalysisEngine:
    global _engine
    if _engine is None:
        _engine = TokenAnalysisEngine()
    return _engine
