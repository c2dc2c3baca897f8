from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Enum as SAEnum
from ..database import Base  # This is the same Base created by declarative_base()


def utcnow() -> datetime:
    """Current instant as naive UTC, the storage convention for all timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def value_enum(enum_cls, name: str) -> SAEnum:
    """Enum column type persisted by ``.value`` ("pending") rather than member name."""
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class BaseModel(Base):
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
