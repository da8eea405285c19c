"""ASSET PULSE — FastAPI REST API."""
import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from common.logger import get_logger, new_request_id
from common.models import (
    AnalysisReport, ComparisonResult, HistoryEntry, HistoryStats, MarketRecord, RiskTolerance,
)
from ingest.registry import REGISTRY
from scoring.aggregator import analyze, build_report, compare, record_analysis, search
from storage import database

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await database.init_db()
    except Exception as e:
        logger.warning(f"⚠️ History store unavailable at startup: {e}")
    yield


app = FastAPI(title="ASSET PULSE API", version="0.1.0", lifespan=lifespan)

app.add_middleware(CORSMiddleware,
    allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# ── API routes (on a shared router, mounted at both "/" and "/api") ───────────

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/assets")
def get_assets():
    """Curated registry symbols."""
    out = []
    for sym in REGISTRY.symbols():
        d = REGISTRY.lookup(sym)
        out.append({"symbol": sym, "name": d.name, "asset_type": d.asset_type.value,
                    "sector": d.sector, "market_cap": d.market_cap})
    return out


@router.get("/analyze/{symbol}", response_model=AnalysisReport)
async def get_analysis(symbol: str,
                       risk_tolerance: RiskTolerance = RiskTolerance.MODERATE,
                       name: Optional[str] = None):
    new_request_id()
    try:
        result = await analyze(symbol, risk_tolerance, name=name)
    except asyncio.TimeoutError:
        raise HTTPException(504, f"Analysis of {symbol} timed out")
    except Exception as e:
        logger.error(f"❌ Analysis failed for {symbol}: {e}")
        raise HTTPException(500, f"Analysis failed for {symbol}")

    await record_analysis(result, risk_tolerance)
    return build_report(result, risk_tolerance)


@router.get("/search", response_model=list[MarketRecord])
async def search_assets(q: str = Query(..., description="Symbol or name fragment")):
    new_request_id()
    return await search(q)


@router.get("/compare", response_model=ComparisonResult)
async def compare_assets(a: str, b: str,
                         risk_tolerance: RiskTolerance = RiskTolerance.MODERATE):
    new_request_id()
    try:
        return await compare(a, b, risk_tolerance)
    except asyncio.TimeoutError:
        raise HTTPException(504, f"Comparison of {a} and {b} timed out")
    except Exception as e:
        logger.error(f"❌ Comparison failed for {a}/{b}: {e}")
        raise HTTPException(500, "Comparison failed")


@router.get("/history", response_model=list[HistoryEntry])
async def get_history():
    try:
        return await database.list_history()
    except Exception as e:
        logger.warning(f"⚠️ History unavailable: {e}")
        return []


@router.get("/history/stats", response_model=HistoryStats)
async def get_history_stats():
    try:
        return await database.history_stats()
    except Exception as e:
        logger.warning(f"⚠️ History unavailable: {e}")
        return database.compute_stats([])


@router.delete("/history")
async def delete_history():
    try:
        await database.clear_history()
    except Exception as e:
        raise HTTPException(503, f"History store unavailable: {e}")
    return {"status": "cleared"}


# Mount routes at root and at /api
app.include_router(router)
app.include_router(router, prefix="/api")
