import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.features.scraping.models.scraped_result import ScrapedResult
from app.features.scraping.schemas.requests import SaveResultRequest, ScrapeResult

logger = logging.getLogger(__name__)


def _to_row(payload: SaveResultRequest | ScrapeResult) -> ScrapedResult:
    # Nested data is stored in its camelCase wire shape
    return ScrapedResult(
        url=payload.url,
        title=payload.title,
        headings=[h.model_dump(mode="json", by_alias=True) for h in payload.headings],
        links=[link.model_dump(mode="json", by_alias=True) for link in payload.links],
        issues=[issue.model_dump(mode="json", by_alias=True) for issue in payload.issues],
        analysis=payload.analysis.model_dump(mode="json", by_alias=True) if payload.analysis else None,
        screenshot=payload.screenshot,
    )


def to_result(record: ScrapedResult) -> ScrapeResult:
    return ScrapeResult.model_validate(record, from_attributes=True)


async def save_result(db: AsyncSession, payload: SaveResultRequest | ScrapeResult) -> Optional[ScrapedResult]:
    """
    Insert one record. Returns the stored row, or None when the database
    rejected it. Each call inserts a new row; there is no deduplication.
    """
    record = _to_row(payload)
    db.add(record)
    try:
        await db.commit()
        await db.refresh(record)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error saving scraped data for {payload.url}: {e}")
        return None
    return record


async def get_all_results(db: AsyncSession) -> List[ScrapedResult]:
    """All records, newest first."""
    query = select(ScrapedResult).order_by(ScrapedResult.created_at.desc(), ScrapedResult.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_result_by_id(db: AsyncSession, result_id: str) -> Optional[ScrapedResult]:
    result = await db.execute(select(ScrapedResult).where(ScrapedResult.id == result_id))
    return result.scalars().first()


async def delete_result_by_id(db: AsyncSession, result_id: str) -> bool:
    """True when a record was deleted."""
    try:
        result = await db.execute(delete(ScrapedResult).where(ScrapedResult.id == result_id))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting scraped data {result_id}: {e}")
        return False
    return result.rowcount > 0


async def delete_results_by_ids(db: AsyncSession, result_ids: Sequence[str]) -> bool:
    """
    Delete a batch in one transaction. The outcome is a single flag for the
    whole batch; ids that do not exist are not an error.
    """
    if not result_ids:
        return False
    try:
        await db.execute(delete(ScrapedResult).where(ScrapedResult.id.in_(list(result_ids))))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting multiple scraped data: {e}")
        return False
    return True
