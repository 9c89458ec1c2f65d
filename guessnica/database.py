import os
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session
from guessnica.config import get_settings

settings = get_settings()


def make_engine(db_path: str) -> Engine:
    # Ensure data directory exists
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    return create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


engine = make_engine(settings.db_path)


def init_db(bind: Engine = engine):
    # Import for the side effect of registering the tables on the metadata
    import guessnica.models  # noqa: F401

    SQLModel.metadata.create_all(bind)


def get_session():
    with Session(engine) as session:
        yield session
