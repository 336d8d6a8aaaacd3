"""Tour CRUD (``/api/tours``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Response, status

from tourstack.api.dependencies import BaseUrlDep, TourServiceDep
from tourstack.api.schemas import TourCreateRequest, TourUpdateRequest

router = APIRouter(prefix="/api/tours", tags=["tours"])


@router.get("", summary="List tours with their stops")
async def list_tours(tours: TourServiceDep) -> list[dict[str, Any]]:
    return [tour.to_api() for tour in await tours.list_tours()]


@router.get("/{tour_id}", summary="Get one tour")
async def get_tour(tour_id: str, tours: TourServiceDep) -> dict[str, Any]:
    return (await tours.get_tour(tour_id)).to_api()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a draft tour")
async def create_tour(body: TourCreateRequest, tours: TourServiceDep) -> dict[str, Any]:
    tour = await tours.create_tour(body.model_dump(exclude_unset=True))
    return tour.to_api()


@router.put("/{tour_id}", summary="Partially update a tour and, optionally, its stops")
async def update_tour(tour_id: str, body: TourUpdateRequest, tours: TourServiceDep) -> dict[str, Any]:
    tour = await tours.update_tour(tour_id, body.model_dump(exclude_unset=True))
    return tour.to_api()


@router.delete("/{tour_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a tour")
async def delete_tour(tour_id: str, tours: TourServiceDep) -> Response:
    await tours.delete_tour(tour_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{tour_id}/duplicate",
    status_code=status.HTTP_201_CREATED,
    summary="Copy a tour and its stops as a new draft",
)
async def duplicate_tour(tour_id: str, tours: TourServiceDep, base_url: BaseUrlDep) -> dict[str, Any]:
    tour = await tours.duplicate_tour(tour_id, base_url)
    return tour.to_api()
