import os
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from studytracker.config import LOCAL_STATE_URL

logger = logging.getLogger(__name__)

# Local SQLite keeps client-side state (the running timer) across restarts.
# Study data itself lives in Supabase, see supabase_rest.py.
engine_args = {}
if LOCAL_STATE_URL.startswith("sqlite"):
    engine_args["connect_args"] = {"check_same_thread": False}

engine = create_engine(LOCAL_STATE_URL, **engine_args, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create the data/ directory for file-backed SQLite, then create all tables."""
    bind = bind or engine
    url = str(bind.url)
    if url.startswith("sqlite:///") and not url.startswith("sqlite:///:memory:"):
        db_file = url[len("sqlite:///"):]
        directory = os.path.dirname(db_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

    # Import all models so they register with Base.metadata
    from studytracker.models.local_state import LocalState  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Local state database initialized.")
