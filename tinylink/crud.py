from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas


class CodeConflictError(Exception):
    """Raised when a link is created with a code that is already taken."""

    def __init__(self, code: str):
        super().__init__(f"Code already exists: {code}")
        self.code = code


def get_link(db: Session, code: str) -> models.Link | None:
    return db.query(models.Link).filter_by(code=code).first()

def code_exists(db: Session, code: str) -> bool:
    return db.query(models.Link.id).filter_by(code=code).first() is not None

def list_links(db: Session) -> list[models.Link]:
    return db.query(models.Link).order_by(models.Link.id).all()

def create_link(db: Session, link_in: schemas.LinkCreate) -> models.Link:
    if code_exists(db, link_in.code):
        raise CodeConflictError(link_in.code)
    link = models.Link(
        code=link_in.code,
        original_url=link_in.original_url,
        last_accessed_at=link_in.last_accessed_at,
        clicks=0,
    )
    db.add(link)
    try:
        db.commit()
    except IntegrityError:
        # lost the race against a concurrent create of the same code
        db.rollback()
        raise CodeConflictError(link_in.code)
    db.refresh(link)
    return link

def delete_link(db: Session, code: str) -> bool:
    deleted = db.query(models.Link).filter_by(code=code).delete(synchronize_session=False)
    db.commit()
    return deleted > 0

def record_click(db: Session, code: str) -> models.Link | None:
    """Count one visit of ``code`` and stamp its last access time.

    The increment is a single UPDATE evaluated by the database, so concurrent
    redirects on the same code never overwrite each other's count.
    Returns the refreshed link, or None when no link has this code.
    """
    matched = (
        db.query(models.Link)
        .filter_by(code=code)
        .update(
            {
                models.Link.clicks: models.Link.clicks + 1,
                models.Link.last_accessed_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    if not matched:
        return None
    return get_link(db, code)
