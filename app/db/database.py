from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings


class Base(DeclarativeBase):
    pass


is_sqlite = settings.database_url.startswith("sqlite")
is_memory_sqlite = is_sqlite and (":memory:" in settings.database_url or settings.database_url == "sqlite://")

connect_args = {"check_same_thread": False} if is_sqlite else {}

engine_kwargs = {}
if is_memory_sqlite:
    # In-memory databases vanish per connection; pin a single shared one.
    engine_kwargs["poolclass"] = StaticPool
elif not is_sqlite:
    engine_kwargs["pool_pre_ping"] = True
    engine_kwargs["pool_recycle"] = 1800

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.sql_echo,
    **engine_kwargs,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
