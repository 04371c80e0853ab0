from typing import Iterator

from sqlalchemy.orm import Session

from registrar.db.session import SessionLocal


# one session per request; services open their own transactions on it
def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
