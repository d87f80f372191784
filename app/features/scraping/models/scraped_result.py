from sqlalchemy import JSON, Column, Index, String, Text

from app.platform.db.base import BaseModel


class ScrapedResult(BaseModel):
    """
    One persisted scrape: the extracted document, its issues and an optional
    content analysis. Rows are written once and only ever deleted afterwards.
    """
    __tablename__ = "scraped_results"

    url = Column(Text, nullable=False)
    title = Column(String(1024), nullable=True)

    # Stored in wire shape ({tag, level, text}, {href, text, isBroken}, ...)
    headings = Column(JSON, nullable=False, default=list)
    links = Column(JSON, nullable=False, default=list)
    issues = Column(JSON, nullable=False, default=list)
    analysis = Column(JSON, nullable=True)

    # data:image/png;base64,... URI
    screenshot = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_scraped_results_created_at", "created_at"),
        Index("idx_scraped_results_url", "url"),
    )
