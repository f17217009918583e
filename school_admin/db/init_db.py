from school_admin.core.logger import logger
from school_admin.db.base import Base
from school_admin.db.session import engine
from school_admin import models  # noqa: F401  (registers the tables)


def init_db(bind=None):
    bind = bind or engine
    logger.info("DB INIT STARTED")
    Base.metadata.create_all(bind=bind)
    logger.info("DB TABLES CREATED")
