"""API endpoints for NEWS score calculation and range administration."""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from ...core.errors import (
    InvalidRangeError,
    LookupUnavailableError,
    MeasurementRequestError,
    NotFoundError,
    OverlapError,
    RangeBatchError,
)
from ..deps import get_range_catalog
from ..schemas.news_score import (
    CreateRangesRequest,
    NewsScoreRequest,
    NewsScoreResponse,
    RangeErrorsResponse,
    ScoreRangeIn,
    ScoreRangeOut,
    ValidationErrorOut,
    ValidationErrorsResponse,
)
from ..services.news_score_service import news_score_service
from ..services.range_service import range_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/newsscore", tags=["newsscore"])


def _unavailable(exc: LookupUnavailableError) -> HTTPException:
    logger.error("Range catalog unavailable: %s", exc)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post(
    "/calculate",
    response_model=NewsScoreResponse,
    responses={400: {"model": ValidationErrorsResponse}},
)
async def calculate_score(payload: NewsScoreRequest, catalog=Depends(get_range_catalog)):
    measurements = [item.to_domain() for item in payload.measurements]
    try:
        result = await news_score_service.calculate(catalog, measurements)
    except MeasurementRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except LookupUnavailableError as exc:
        raise _unavailable(exc) from exc
    if result.errors:
        body = ValidationErrorsResponse(errors=[ValidationErrorOut.from_domain(e) for e in result.errors])
        return JSONResponse(status_code=400, content=body.model_dump(mode="json"))
    return NewsScoreResponse(score=result.total_score)


@router.get("/ranges", response_model=List[ScoreRangeOut])
async def list_ranges(
    measurement_type: str | None = Query(default=None),
    catalog=Depends(get_range_catalog),
) -> List[ScoreRangeOut]:
    try:
        ranges = range_service.list_ranges(catalog, measurement_type)
    except LookupUnavailableError as exc:
        raise _unavailable(exc) from exc
    return [ScoreRangeOut.from_domain(item) for item in ranges]


@router.post(
    "/ranges",
    response_model=List[ScoreRangeOut],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": RangeErrorsResponse}},
)
async def create_ranges(payload: CreateRangesRequest, catalog=Depends(get_range_catalog)):
    try:
        created = range_service.create_ranges(catalog, [item.to_domain() for item in payload.ranges])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RangeBatchError as exc:
        logger.warning("Create ranges rejected with %s errors", len(exc.errors))
        return JSONResponse(status_code=400, content=RangeErrorsResponse(errors=exc.errors).model_dump())
    except LookupUnavailableError as exc:
        raise _unavailable(exc) from exc
    return [ScoreRangeOut.from_domain(item) for item in created]


@router.put("/ranges/{range_id}", response_model=ScoreRangeOut)
async def update_range(range_id: int, payload: ScoreRangeIn, catalog=Depends(get_range_catalog)) -> ScoreRangeOut:
    try:
        updated = range_service.update_range(catalog, range_id, payload.to_domain())
    except NotFoundError as exc:
        logger.warning("Update range request for non-existent range id: %s", range_id)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (InvalidRangeError, OverlapError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except LookupUnavailableError as exc:
        raise _unavailable(exc) from exc
    return ScoreRangeOut.from_domain(updated)


@router.delete("/ranges/{range_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_range(range_id: int, catalog=Depends(get_range_catalog)) -> Response:
    try:
        range_service.delete_range(catalog, range_id)
    except NotFoundError as exc:
        logger.warning("Delete range request for non-existent range id: %s", range_id)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except LookupUnavailableError as exc:
        raise _unavailable(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/ranges", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ranges(
    ids: Optional[List[int]] = Body(default=None),
    catalog=Depends(get_range_catalog),
) -> Response:
    try:
        range_service.delete_ranges(catalog, ids or [])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except LookupUnavailableError as exc:
        raise _unavailable(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
