# Create Engine
# Make DB Session
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from escalator.core.config import settings


def build_engine(database_url: str):

    # SQLite is the single-user store; one connection is shared across the threadpool
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(database_url)


# An Engine building a connection with DATABASE using DATABASE URL
engine = build_engine(settings.DATABASE_URL)

# Session for ORM binded with DATABASE Connection (Engine) to perform the DATABASE Operations
SessionLocal = sessionmaker(bind=engine, autoflush=False)

# Every model inherits this Base so its class is treated as a Table
Base = declarative_base()

def get_db():

    db = SessionLocal()

    try:
        yield db
    finally:
        db.close()
