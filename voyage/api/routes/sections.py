"""Section endpoints - day plans, packing, transport, concerts, shopping.

Every route loads the trip, applies one pure editor and hands the result to
``TripWorkspace.replace``; the response is the full replacement document.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from voyage.api.auth import get_workspace
from voyage.models.itinerary import ConcertInfo, Itinerary, ShoppingItem
from voyage.models.transport import (
    BusTransport,
    CarRentalTransport,
    FlightTransport,
    MetroTransport,
)
from voyage.planning import sections
from voyage.store.workspace import TripWorkspace

router = APIRouter(prefix="/itineraries/{itinerary_id}", tags=["sections"])

Workspace = Annotated[TripWorkspace, Depends(get_workspace)]
TransportBody = Annotated[
    FlightTransport | MetroTransport | BusTransport | CarRentalTransport,
    Body(discriminator="type"),
]


class ActivityRequest(BaseModel):
    """Request body for adding an activity."""

    location: str
    time_slot: str = ""
    notes: str = ""


class ActivityUpdateRequest(BaseModel):
    """Request body for editing an activity; omitted fields are kept."""

    location: str | None = None
    time_slot: str | None = None
    notes: str | None = None


class MoveActivityRequest(BaseModel):
    """Request body for moving an activity to another day."""

    target_day: int = Field(..., ge=1)


class ThemeRequest(BaseModel):
    theme: str


class PackingRequest(BaseModel):
    """Request body for adding a packing item."""

    name: str
    category: str = sections.PACKING_PRESETS[0]
    custom_category: str = ""


class ImageRequest(BaseModel):
    """Inline image (data URL) attached to a booking."""

    image: str = Field(..., min_length=1)


def _apply(
    workspace: TripWorkspace, itinerary_id: str, edit: Callable[[Itinerary], Itinerary]
) -> Itinerary:
    return workspace.replace(edit(workspace.get(itinerary_id)))


# --- Daily itinerary ---


@router.post("/days/{day_id}/activities", response_model=Itinerary)
async def add_activity(
    itinerary_id: str, day_id: str, request: ActivityRequest, workspace: Workspace
) -> Itinerary:
    """Append an activity to a day."""
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.add_activity(
            it, day_id, request.location, request.time_slot, request.notes
        ),
    )


@router.put("/days/{day_id}/activities/{activity_id}", response_model=Itinerary)
async def update_activity(
    itinerary_id: str,
    day_id: str,
    activity_id: str,
    request: ActivityUpdateRequest,
    workspace: Workspace,
) -> Itinerary:
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.update_activity(
            it,
            day_id,
            activity_id,
            location=request.location,
            time_slot=request.time_slot,
            notes=request.notes,
        ),
    )


@router.delete("/days/{day_id}/activities/{activity_id}", response_model=Itinerary)
async def remove_activity(
    itinerary_id: str, day_id: str, activity_id: str, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace, itinerary_id, lambda it: sections.remove_activity(it, day_id, activity_id)
    )


@router.post("/days/{day_id}/activities/{activity_id}/copy", response_model=Itinerary)
async def copy_activity(
    itinerary_id: str, day_id: str, activity_id: str, workspace: Workspace
) -> Itinerary:
    """Duplicate an activity at the end of the same day."""
    return _apply(
        workspace, itinerary_id, lambda it: sections.copy_activity(it, day_id, activity_id)
    )


@router.post("/days/{day_id}/activities/{activity_id}/move", response_model=Itinerary)
async def move_activity(
    itinerary_id: str,
    day_id: str,
    activity_id: str,
    request: MoveActivityRequest,
    workspace: Workspace,
) -> Itinerary:
    """Move an activity to the end of another day."""
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.move_activity(it, day_id, activity_id, request.target_day),
    )


@router.put("/days/{day_id}/theme", response_model=Itinerary)
async def set_day_theme(
    itinerary_id: str, day_id: str, request: ThemeRequest, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace, itinerary_id, lambda it: sections.set_day_theme(it, day_id, request.theme)
    )


# --- Packing ---


@router.post("/packing", response_model=Itinerary)
async def add_packing_item(
    itinerary_id: str, request: PackingRequest, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.add_packing_item(
            it, request.name, request.category, request.custom_category
        ),
    )


@router.post("/packing/{item_id}/toggle", response_model=Itinerary)
async def toggle_packing_item(itinerary_id: str, item_id: str, workspace: Workspace) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.toggle_packing_item(it, item_id))


@router.delete("/packing/{item_id}", response_model=Itinerary)
async def remove_packing_item(itinerary_id: str, item_id: str, workspace: Workspace) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.remove_packing_item(it, item_id))


# --- Transport ---


@router.post("/transports", response_model=Itinerary)
async def add_transport(
    itinerary_id: str, info: TransportBody, workspace: Workspace
) -> Itinerary:
    """Add a booking; the body's ``type`` picks flight, metro, bus or rental fields."""
    return _apply(workspace, itinerary_id, lambda it: sections.save_transport(it, info))


@router.put("/transports/{transport_id}", response_model=Itinerary)
async def update_transport(
    itinerary_id: str,
    transport_id: str,
    info: TransportBody,
    workspace: Workspace,
) -> Itinerary:
    return _apply(
        workspace, itinerary_id, lambda it: sections.save_transport(it, info, transport_id)
    )


@router.delete("/transports/{transport_id}", response_model=Itinerary)
async def remove_transport(
    itinerary_id: str, transport_id: str, workspace: Workspace
) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.remove_transport(it, transport_id))


@router.post("/transports/{transport_id}/images", response_model=Itinerary)
async def attach_transport_image(
    itinerary_id: str, transport_id: str, request: ImageRequest, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.attach_transport_image(it, transport_id, request.image),
    )


@router.delete("/transports/{transport_id}/images/{index}", response_model=Itinerary)
async def remove_transport_image(
    itinerary_id: str, transport_id: str, index: int, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.remove_transport_image(it, transport_id, index),
    )


# --- Concerts ---


@router.post("/concerts", response_model=Itinerary)
async def add_concert(itinerary_id: str, info: ConcertInfo, workspace: Workspace) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.save_concert(it, info))


@router.put("/concerts/{concert_id}", response_model=Itinerary)
async def update_concert(
    itinerary_id: str, concert_id: str, info: ConcertInfo, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace, itinerary_id, lambda it: sections.save_concert(it, info, concert_id)
    )


@router.delete("/concerts/{concert_id}", response_model=Itinerary)
async def remove_concert(itinerary_id: str, concert_id: str, workspace: Workspace) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.remove_concert(it, concert_id))


@router.post("/concerts/{concert_id}/checklist/{item_id}/toggle", response_model=Itinerary)
async def toggle_concert_checklist(
    itinerary_id: str, concert_id: str, item_id: str, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace,
        itinerary_id,
        lambda it: sections.toggle_concert_checklist(it, concert_id, item_id),
    )


# --- Shopping ---


@router.post("/shopping", response_model=Itinerary)
async def add_shopping_item(
    itinerary_id: str, item: ShoppingItem, workspace: Workspace
) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.save_shopping_item(it, item))


@router.put("/shopping/{item_id}", response_model=Itinerary)
async def update_shopping_item(
    itinerary_id: str, item_id: str, item: ShoppingItem, workspace: Workspace
) -> Itinerary:
    return _apply(
        workspace, itinerary_id, lambda it: sections.save_shopping_item(it, item, item_id)
    )


@router.post("/shopping/{item_id}/toggle", response_model=Itinerary)
async def toggle_shopping_item(itinerary_id: str, item_id: str, workspace: Workspace) -> Itinerary:
    """Flip the bought flag; only bought items count toward expenses."""
    return _apply(workspace, itinerary_id, lambda it: sections.toggle_shopping_item(it, item_id))


@router.delete("/shopping/{item_id}", response_model=Itinerary)
async def remove_shopping_item(
    itinerary_id: str, item_id: str, workspace: Workspace
) -> Itinerary:
    return _apply(workspace, itinerary_id, lambda it: sections.remove_shopping_item(it, item_id))
