import importlib
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from bakery.config import settings

log = logging.getLogger("bakery.db")

DATABASE_URL = settings.DATABASE_URL
engine = create_engine(DATABASE_URL, future=True, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# every module that declares tables; imported so metadata is populated
MODEL_MODULES = [
    "bakery.models.product",
    "bakery.models.address",
    "bakery.models.cart",
    "bakery.models.cart_item",
    "bakery.models.order",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    With ``reset=True`` (or RESET_DB set in the environment) all tables are
    dropped first, which is what the test-suite relies on for a clean store.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset or settings.RESET_DB:
        log.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.info("Database initialized (%s)", engine.url.render_as_string(hide_password=True))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
