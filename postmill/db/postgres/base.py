from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from postmill.settings import settings

engine = create_engine(settings.postgres_url, future=True, echo=False, pool_pre_ping=True)
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
)
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create the render cache table if it is missing."""
    from postmill.models import cache_entry  # noqa: F401  (registers the table)

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
