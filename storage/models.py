"""SQLAlchemy ORM models for the analysis history store."""
from sqlalchemy import (
    BigInteger, CheckConstraint, Column, Float, Index, String, TIMESTAMP,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class AnalysisHistoryDB(Base):
    __tablename__ = "analysis_history"

    # Insertion order; newest row has the highest seq
    seq = Column(BigInteger, primary_key=True, autoincrement=True)
    entry_id = Column(String(32), unique=True, nullable=False)
    symbol = Column(String(32), nullable=False)
    name = Column(String(200))
    asset_type = Column(
        String(10),
        CheckConstraint("asset_type IN ('stock', 'crypto', 'forex')", name="ck_history_type"),
        nullable=False,
    )
    recommendation = Column(
        String(10),
        CheckConstraint("recommendation IN ('buy', 'hold', 'sell')", name="ck_history_rec"),
        nullable=False,
    )
    risk_tolerance = Column(
        String(20),
        CheckConstraint(
            "risk_tolerance IN ('conservative', 'moderate', 'aggressive')",
            name="ck_history_tolerance",
        ),
        nullable=False,
    )
    price = Column(Float, nullable=False)
    timestamp = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_history_symbol", "symbol"),
    )
