from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings

# SQLite connections are shared across the request threadpool
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

# autocommit=False: Changes require explicit commit
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Largest value an Integer primary key holds on every supported backend
MAX_ROW_ID = 2**31 - 1

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    Each request gets its own session, closed once the response is sent.
    Tests override this dependency to point at an in-memory database.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always close session, even if request raises an exception
        db.close()
