from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def create_db_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for the given URL."""
    connect_args = {}
    kwargs = {}
    # SQLite needs check_same_thread=False for multithreading in FastAPI
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        # In-memory databases live on a single shared connection
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, connect_args=connect_args, future=True, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def db_healthcheck(engine: Engine) -> bool:
    """Return True when the database answers a trivial query."""
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1


def get_db(request: Request):
    """
    Dependency that provides a database session and ensures proper cleanup.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
