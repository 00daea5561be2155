from sqlmodel import SQLModel, create_engine, Session
from storefront.config import settings


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)


def create_db_and_tables():
    from storefront.models import cart, persisted_state
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
