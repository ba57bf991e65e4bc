"""Itinerary endpoints - list, create, edit details, replace, delete, expenses."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from voyage.api.auth import get_workspace
from voyage.models.expenses import ExpenseSummary
from voyage.models.itinerary import Itinerary
from voyage.planning.expenses import summarize_expenses
from voyage.store.workspace import SortKey, TripWorkspace

router = APIRouter(prefix="/itineraries", tags=["itineraries"])


class TripDetailsRequest(BaseModel):
    """Request body for POST /itineraries and PUT /itineraries/{id}.

    The date range is checked by the planner, so ``start_date > end_date``
    answers 400 rather than 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    city: str
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    vibe: list[str] | None = None


class ItineraryListResponse(BaseModel):
    """Response for GET /itineraries."""

    itineraries: list[Itinerary]
    save_pending: bool


@router.get("", response_model=ItineraryListResponse)
async def list_itineraries(
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
    sort: Annotated[SortKey, Query()] = "date",
) -> ItineraryListResponse:
    """List the caller's trips.

    Args:
        workspace: Caller's trip workspace
        sort: ``date`` (start date ascending) or ``destination`` (city)

    Returns:
        Sorted itineraries and whether a save is still pending
    """
    return ItineraryListResponse(
        itineraries=workspace.list_sorted(sort), save_pending=workspace.save_pending
    )


@router.post("", response_model=Itinerary, status_code=status.HTTP_201_CREATED)
async def create_itinerary(
    request: TripDetailsRequest,
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
) -> Itinerary:
    """Create a trip with one day plan per calendar day."""
    return workspace.create(
        request.title, request.city, request.start_date, request.end_date, request.vibe
    )


@router.get("/{itinerary_id}", response_model=Itinerary)
async def get_itinerary(
    itinerary_id: str,
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
) -> Itinerary:
    """Open a trip; it becomes the workspace's current view."""
    return workspace.select(itinerary_id)


@router.put("/{itinerary_id}", response_model=Itinerary)
async def edit_itinerary(
    itinerary_id: str,
    request: TripDetailsRequest,
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
) -> Itinerary:
    """Edit title, destination, dates and vibe.

    Changing the dates resizes the day list: new days are appended as empty
    "Free Day" plans, trailing days are dropped with their activities.
    """
    return workspace.edit_details(
        itinerary_id,
        request.title,
        request.city,
        request.start_date,
        request.end_date,
        request.vibe,
    )


@router.put("/{itinerary_id}/document", response_model=Itinerary)
async def replace_itinerary(
    itinerary_id: str,
    itinerary: Itinerary,
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
) -> Itinerary:
    """Replace the whole trip document.

    Raises:
        HTTPException: 400 if the body id differs from the path id
    """
    if itinerary.id != itinerary_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Itinerary id in body does not match path",
        )
    return workspace.replace(itinerary)


@router.delete("/{itinerary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_itinerary(
    itinerary_id: str,
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
) -> None:
    """Delete a trip remotely, then locally. A remote failure answers 502."""
    await workspace.delete(itinerary_id)


@router.get("/{itinerary_id}/expenses", response_model=ExpenseSummary)
async def get_expenses(
    itinerary_id: str,
    workspace: Annotated[TripWorkspace, Depends(get_workspace)],
) -> ExpenseSummary:
    """Per-currency spending: transports, concerts and bought shopping items."""
    return summarize_expenses(workspace.get(itinerary_id))
