from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from .database import Base


class Link(Base):
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(8), unique=True, index=True, nullable=False)
    original_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    clicks = Column(Integer, default=0, nullable=False)
    last_accessed_at = Column(DateTime(timezone=True), nullable=True)
    # stored and returned, never acted on; deletes are hard deletes
    is_active = Column(Boolean, default=True, nullable=False)
