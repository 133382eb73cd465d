from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from guard.models import Base

# Process-lifetime only: nothing is written to disk
DATABASE_URL = "sqlite://"


def create_memory_engine(url: str = DATABASE_URL) -> Engine:
    # One shared connection, otherwise every checkout sees an empty database
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def make_session_factory(engine: Engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine):
    Base.metadata.create_all(bind=engine)
