from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import declarative_base
from uuid_extension import uuid7

Base = declarative_base()


class BaseModel(Base):
    """
    Common columns for stored records. Ids are uuid7 strings, so sorting by id
    follows insertion order even when two rows share a created_at second.
    """
    __abstract__ = True

    id = Column(String, primary_key=True, default=lambda: str(uuid7()), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"

# Models import this Base. Do not import models here to avoid circular imports;
# app.platform.db.session.init_db imports them before creating tables.
