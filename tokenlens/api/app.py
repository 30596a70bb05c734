"""
TokenLens - FastAPI Application
Thin HTTP wrapper with /healthz, /metrics, token analysis and provider listing.
"""
import uuid
from typing import Dict, Any, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from tokenlens.config.settings import get_settings
from tokenlens.utils.logger import get_logger, setup_logging
from tokenlens.utils.helpers import utc_timestamp
from tokenlens.api.cache import get_response_cache
from tokenlens.engines.analysis_engine import InvalidTokenInput, get_analysis_engine
from tokenlens.engines.consensus import WEIGHT_VARIANTS
from tokenlens.engines.reconciler import PRICE_PRIORITY

logger = get_logger("api")

# Application state
app_state: Dict[str, Any] = {
    "instance_id": str(uuid.uuid4())[:8],
    "started_at": None,
    "analyses_completed": 0,
    "invalid_requests": 0,
    "last_analysis_time": None,
    "errors": 0,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    setup_logging()
    settings = get_settings()
    app_state["started_at"] = utc_timestamp()

    logger.info("tokenlens_starting",
                version=settings.version,
                instance=app_state["instance_id"],
                mode=settings.analysis_mode)

    engine = get_analysis_engine()
    await engine.initialize()

    logger.info("tokenlens_ready")

    yield

    logger.info("tokenlens_shutting_down")
    await engine.shutdown()


app = FastAPI(
    title="TokenLens",
    description="Multi-provider token data reconciliation and risk scoring",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ─── Health & Metrics ───────────────────────────────────────────

@app.get("/healthz", tags=["System"])
async def health_check():
    """Fast health check endpoint for load balancers and monitoring."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "instance": app_state["instance_id"],
            "uptime_since": app_state["started_at"],
            "timestamp": utc_timestamp(),
        },
    )


@app.get("/metrics", tags=["System"])
async def metrics():
    """Request counters and cache statistics."""
    settings = get_settings()
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.version,
            "instance_id": app_state["instance_id"],
            "started_at": app_state["started_at"],
        },
        "analyses": {
            "completed": app_state["analyses_completed"],
            "invalid_requests": app_state["invalid_requests"],
            "last_analysis_time": app_state["last_analysis_time"],
            "errors": app_state["errors"],
        },
        "cache_stats": get_response_cache().stats,
        "timestamp": utc_timestamp(),
    }


# ─── Analysis Endpoints ─────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_input: Optional[str] = Field(default=None, alias="tokenInput")
    mode: Optional[str] = None


@app.post("/api/v1/analyze", tags=["Analysis"])
async def analyze_token(request: AnalyzeRequest):
    """Analyze a token by contract address or symbol."""
    mode = request.mode or get_settings().analysis_mode
    cache = get_response_cache()
    token = request.token_input or ""

    cached = cache.get(token, mode)
    if cached is not None:
        return cached

    try:
        result = await get_analysis_engine().analyze(token, mode)
        response = result.to_dict()
    except InvalidTokenInput as e:
        app_state["invalid_requests"] += 1
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        app_state["errors"] += 1
        logger.error("analysis_error", token=token, error=str(e))
        raise HTTPException(status_code=500, detail="Analysis failed")

    app_state["analyses_completed"] += 1
    app_state["last_analysis_time"] = utc_timestamp()
    cache.put(token, mode, response)
    return response


@app.get("/api/v1/providers", tags=["Analysis"])
async def list_providers():
    """Configured providers, price priority and consensus weights."""
    settings = get_settings()
    engine = get_analysis_engine()
    return {
        "providers": [p.value for p in engine.gateway.providers],
        "price_priority": [p.value for p in PRICE_PRIORITY],
        "trader_analytics_chains": settings.reconcile.trader_analytics_chains,
        "consensus_variant": settings.consensus.consensus_variant,
        "consensus_weights": engine.aggregator.weights,
        "weight_variants": WEIGHT_VARIANTS,
        "timestamp": utc_timestamp(),
    }
