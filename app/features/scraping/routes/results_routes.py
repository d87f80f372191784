from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scraping.exceptions import InvalidInputError, PersistenceError
from app.features.scraping.schemas.requests import DeleteResultsRequest, SaveResultRequest
from app.features.scraping.services.result_service import (
    delete_result_by_id,
    delete_results_by_ids,
    get_all_results,
    get_result_by_id,
    save_result,
    to_result,
)
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/results", tags=["Results"])


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Save a scrape result",
)
async def save_result_route(
    request: SaveResultRequest,
    db: AsyncSession = Depends(get_db),
):
    if not request.url:
        raise InvalidInputError("URL is required")

    record = await save_result(db, request)
    if record is None:
        raise PersistenceError("Failed to save data")

    return api_response(
        data=to_result(record),
        message="Result saved successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.get(
    "",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="List saved results",
    description="All saved results, newest first",
)
async def list_results(db: AsyncSession = Depends(get_db)):
    records = await get_all_results(db)
    return api_response(
        data=[to_result(record) for record in records],
        message="Results retrieved successfully",
        status_code=status.HTTP_200_OK,
    )


@router.get(
    "/{result_id}",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Get a saved result",
)
async def get_result(result_id: str, db: AsyncSession = Depends(get_db)):
    record = await get_result_by_id(db, result_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Result not found")

    return api_response(
        data=to_result(record),
        message="Result retrieved successfully",
        status_code=status.HTTP_200_OK,
    )


async def _delete_one(db: AsyncSession, result_id: str) -> None:
    # 404 only for a missing row; a failed delete is a persistence error
    if await get_result_by_id(db, result_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Result not found")
    if not await delete_result_by_id(db, result_id):
        raise PersistenceError("Failed to delete scraped data")


@router.delete(
    "/{result_id}",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Delete a saved result",
)
async def delete_result(result_id: str, db: AsyncSession = Depends(get_db)):
    await _delete_one(db, result_id)

    return api_response(
        data={"id": result_id},
        message="Result deleted successfully",
        status_code=status.HTTP_200_OK,
    )


@router.delete(
    "",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Delete one or many saved results",
    description='Body is either {"id": "..."} or {"ids": ["...", "..."]}',
)
async def delete_results(
    request: DeleteResultsRequest,
    db: AsyncSession = Depends(get_db),
):
    if request.id:
        await _delete_one(db, request.id)
    elif request.ids:
        if not await delete_results_by_ids(db, request.ids):
            raise PersistenceError("Failed to delete scraped data")
    else:
        raise InvalidInputError("Missing id or ids parameter")

    return api_response(
        data={"ids": [request.id] if request.id else request.ids},
        message="Results deleted successfully",
        status_code=status.HTTP_200_OK,
    )
