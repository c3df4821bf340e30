from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from uam.config import get_settings

settings = get_settings()

# SQLite needs check_same_thread=False under FastAPI
connect_args = {"check_same_thread": False} if "sqlite" in settings.database_url else {}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    """FastAPI dependency - one database session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
