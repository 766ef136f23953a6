import logging

from sqlalchemy.engine import Engine

from schoolms.db.base import Base
from schoolms.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind: Engine = engine) -> None:
    Base.metadata.create_all(bind=bind)
    logger.info("database schema ready (%s)", bind.url.render_as_string(hide_password=True))
