from sqlalchemy import Engine

from config.app_config import load_app_config
from db import Base, create_db_engine
import models  # noqa: F401


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    cfg = load_app_config()
    eng = create_db_engine(cfg.database_url())
    try:
        init_db(eng)
    finally:
        eng.dispose()
