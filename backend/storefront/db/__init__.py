import importlib
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from storefront.config import settings

log = logging.getLogger("storefront.db")

DATABASE_URL = settings.DATABASE_URL

connect_args = {}
if make_url(DATABASE_URL).get_backend_name() == "sqlite":
    # FastAPI runs sync dependencies and endpoints on different worker threads
    connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL, future=True, echo=settings.SQL_ECHO, connect_args=connect_args
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# every module that declares tables; imported before create_all so metadata is complete
MODEL_MODULES = [
    "storefront.models.category",
    "storefront.models.product",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    With reset=True all catalogue tables are dropped and recreated, which is
    what tests and RESET_DB=1 deployments want. Otherwise existing tables are
    left in place and only missing ones are created.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database schema at %s", engine.url.render_as_string(hide_password=True))
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.debug("Database initialized: %s", sorted(Base.metadata.tables))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
