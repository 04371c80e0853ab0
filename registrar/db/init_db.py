from registrar.db.base import Base
from registrar.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
