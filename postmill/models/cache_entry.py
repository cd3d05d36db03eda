from sqlalchemy import JSON, Column, DateTime, String, func

from postmill.db.postgres.base import Base


class CacheEntry(Base):
    __tablename__ = "cache_entries"

    key = Column(String(512), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
