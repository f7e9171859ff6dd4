import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from garden_backend.constants import DEFAULT_DATABASE_URL

DATABASE_URL = os.getenv("GARDEN_TRACKER_DATABASE_URL", DEFAULT_DATABASE_URL)

# SQLite connections are shared with the FastAPI threadpool and the scheduler thread
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
