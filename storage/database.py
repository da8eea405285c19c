"""Analysis history storage.

Backend is selected at startup via the DATABASE_URL environment variable:
  - DATABASE_URL=none (or unset) → CSV file in DATA_DIR/history.csv (default)
  - DATABASE_URL=postgresql://... → PostgreSQL via SQLAlchemy async + asyncpg

The store is append-only from the caller's point of view, returns entries
most-recent-first and keeps at most HISTORY_LIMIT of them (oldest evicted).
All public functions are async so they integrate with FastAPI.
"""
import asyncio
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from common.logger import get_logger
from common.models import AssetType, HistoryEntry, HistoryStats, Recommendation, RiskTolerance
from config.settings import DATA_DIR, DATABASE_URL, HISTORY_LIMIT

logger = get_logger("database")

HISTORY_FILE = "history.csv"
CSV_COLUMNS = ["id", "symbol", "name", "asset_type", "recommendation",
               "risk_tolerance", "price", "timestamp"]
RECENT_COUNT = 5

# ── Backend detection ──────────────────────────────────────────────────────────
USE_POSTGRES: bool = DATABASE_URL.lower() not in ("none", "", "null")

_engine = None
_SessionFactory = None

if USE_POSTGRES:
    from sqlalchemy import delete, select
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from storage.models import AnalysisHistoryDB, Base

    _db_url = DATABASE_URL
    if _db_url.startswith("postgres://"):
        _db_url = "postgresql+asyncpg://" + _db_url[len("postgres://"):]
    elif _db_url.startswith("postgresql://") and "+asyncpg" not in _db_url:
        _db_url = _db_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    _engine = create_async_engine(_db_url, echo=False, pool_pre_ping=True,
                                  pool_size=5, max_overflow=10)
    _SessionFactory = async_sessionmaker(_engine, expire_on_commit=False)
    logger.info(f"[PG] Backend: {_db_url.split('@')[-1]}")
else:
    logger.info("[CSV] Backend: %s/%s", DATA_DIR, HISTORY_FILE)


def _stamp(entry: HistoryEntry) -> HistoryEntry:
    return entry.model_copy(update={
        "id": entry.id or uuid.uuid4().hex[:16],
        "timestamp": entry.timestamp or datetime.now(timezone.utc),
    })


# ── CSV helpers (sync; run via asyncio.to_thread) ─────────────────────────────
# Each helper holds _csv_lock across its read-modify-write; the file is
# replaced atomically so readers never see a partial write.

_csv_lock = threading.Lock()


def _csv_read(data_dir: Path) -> pd.DataFrame:
    path = data_dir / HISTORY_FILE
    if not path.exists() or path.stat().st_size == 0:
        return pd.DataFrame(columns=CSV_COLUMNS)
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        logger.warning("[CSV] %s has no rows, treating history as empty", path)
        return pd.DataFrame(columns=CSV_COLUMNS)


def _csv_write(df: pd.DataFrame, data_dir: Path) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / HISTORY_FILE
    tmp = path.with_name(HISTORY_FILE + ".tmp")
    df.to_csv(tmp, index=False)
    os.replace(tmp, path)


def _csv_append(entry: HistoryEntry, data_dir: Path, limit: int) -> HistoryEntry:
    entry = _stamp(entry)
    row = pd.DataFrame([{
        "id": entry.id,
        "symbol": entry.symbol,
        "name": entry.name,
        "asset_type": entry.asset_type.value,
        "recommendation": entry.recommendation.value,
        "risk_tolerance": entry.risk_tolerance.value,
        "price": repr(float(entry.price)),
        "timestamp": entry.timestamp.isoformat(),
    }], columns=CSV_COLUMNS)
    with _csv_lock:
        existing = _csv_read(data_dir)
        df = pd.concat([row, existing], ignore_index=True) if not existing.empty else row
        _csv_write(df.head(limit), data_dir)
    return entry


def _csv_list(data_dir: Path, limit: int) -> list[HistoryEntry]:
    with _csv_lock:
        df = _csv_read(data_dir).head(limit)
    return [HistoryEntry(**rec) for rec in df.to_dict(orient="records")]


def _csv_clear(data_dir: Path) -> None:
    with _csv_lock:
        (data_dir / HISTORY_FILE).unlink(missing_ok=True)


# ── PostgreSQL helpers (async) ─────────────────────────────────────────────────

def _pg_row_to_entry(r: "AnalysisHistoryDB") -> HistoryEntry:
    return HistoryEntry(
        id=r.entry_id, symbol=r.symbol, name=r.name or r.symbol,
        asset_type=r.asset_type, recommendation=r.recommendation,
        risk_tolerance=r.risk_tolerance, price=float(r.price), timestamp=r.timestamp,
    )


async def _pg_append(entry: HistoryEntry, limit: int) -> HistoryEntry:
    entry = _stamp(entry)
    async with _SessionFactory() as session:
        async with session.begin():
            session.add(AnalysisHistoryDB(
                entry_id=entry.id,
                symbol=entry.symbol,
                name=entry.name,
                asset_type=entry.asset_type.value,
                recommendation=entry.recommendation.value,
                risk_tolerance=entry.risk_tolerance.value,
                price=entry.price,
                timestamp=entry.timestamp,
            ))
            await session.flush()
            # seq of the oldest row still inside the window
            cutoff = (await session.execute(
                select(AnalysisHistoryDB.seq)
                .order_by(AnalysisHistoryDB.seq.desc())
                .offset(limit - 1)
                .limit(1)
            )).scalar_one_or_none()
            if cutoff is not None:
                await session.execute(delete(AnalysisHistoryDB).where(AnalysisHistoryDB.seq < cutoff))
    logger.info("[PG] Recorded %s (%s)", entry.symbol, entry.recommendation.value)
    return entry


async def _pg_list(limit: int) -> list[HistoryEntry]:
    async with _SessionFactory() as session:
        stmt = select(AnalysisHistoryDB).order_by(AnalysisHistoryDB.seq.desc()).limit(limit)
        rows = (await session.execute(stmt)).scalars().all()
    return [_pg_row_to_entry(r) for r in rows]


async def _pg_clear() -> None:
    async with _SessionFactory() as session:
        async with session.begin():
            await session.execute(delete(AnalysisHistoryDB))


# ── Stats ──────────────────────────────────────────────────────────────────────

def compute_stats(entries: list[HistoryEntry]) -> HistoryStats:
    def breakdown(attr: str, enum_cls) -> dict[str, int]:
        counts = {member.value: 0 for member in enum_cls}
        for e in entries:
            counts[getattr(e, attr).value] += 1
        return counts

    return HistoryStats(
        total_analyses=len(entries),
        asset_type_breakdown=breakdown("asset_type", AssetType),
        risk_profile_breakdown=breakdown("risk_tolerance", RiskTolerance),
        recommendation_breakdown=breakdown("recommendation", Recommendation),
        recent_analyses=entries[:RECENT_COUNT],
    )


# ── Public async API ───────────────────────────────────────────────────────────

async def append_history(entry: HistoryEntry) -> HistoryEntry:
    """Record one finished analysis; evicts the oldest entries past HISTORY_LIMIT."""
    if USE_POSTGRES:
        return await _pg_append(entry, HISTORY_LIMIT)
    return await asyncio.to_thread(_csv_append, entry, DATA_DIR, HISTORY_LIMIT)


async def list_history() -> list[HistoryEntry]:
    """Stored entries, most recent first."""
    if USE_POSTGRES:
        return await _pg_list(HISTORY_LIMIT)
    return await asyncio.to_thread(_csv_list, DATA_DIR, HISTORY_LIMIT)


async def history_stats() -> HistoryStats:
    return compute_stats(await list_history())


async def clear_history() -> None:
    if USE_POSTGRES:
        await _pg_clear()
    else:
        await asyncio.to_thread(_csv_clear, DATA_DIR)


async def init_db() -> None:
    """Create all tables (idempotent)."""
    if not USE_POSTGRES:
        return
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[PG] Tables ensured")
