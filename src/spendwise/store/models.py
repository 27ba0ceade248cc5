"""SQLAlchemy models for the spendwise store."""

from datetime import datetime, UTC
from sqlalchemy import Column, String, LargeBinary, DateTime, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class KeyValueEntry(Base):
    """One stored value."""

    __tablename__ = "kv_entries"

    key = Column(String, primary_key=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
