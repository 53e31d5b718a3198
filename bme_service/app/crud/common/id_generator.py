# app/crud/common/id_generator.py
import time

from sqlalchemy.orm import Session


def generate_prefixed_id(db: Session, column, prefix: str) -> str:
    """``<prefix>-<epoch ms>``, bumped by one ms until ``column`` has no such value."""
    stamp = int(time.time() * 1000)
    while db.query(column).filter(column == f"{prefix}-{stamp}").first():
        stamp += 1
    return f"{prefix}-{stamp}"
