"""Transport booking models - one variant per transport mode."""

import datetime as dt
from typing import Annotated, Literal

from pydantic import Field

from voyage.models.common import CamelDocumentModel, Currency, new_id


class _TransportBase(CamelDocumentModel):
    id: str = Field(default_factory=new_id)
    detail: str = ""
    cost: float = Field(0, ge=0)
    currency: Currency = Currency.TWD
    images: list[str] = Field(default_factory=list)


class _ScheduledTransport(_TransportBase):
    date: dt.date | None = None
    time: str = ""
    arrival_time: str = ""


class FlightTransport(_ScheduledTransport):
    """Flight with gate/seat details."""

    type: Literal["飛機"] = "飛機"
    flight_number: str = ""
    gate: str = ""
    seat: str = ""
    terminal: str = ""
    arrival_terminal: str = ""


class MetroTransport(_ScheduledTransport):
    """Metro / rail ticket."""

    type: Literal["地鐵"] = "地鐵"


class BusTransport(_ScheduledTransport):
    """Bus ticket."""

    type: Literal["巴士"] = "巴士"


class CarRentalTransport(_TransportBase):
    """Rental car with pickup/return legs.

    When ``is_same_location`` is set, the return location mirrors pickup
    on every save (see ``with_mirrored_return``).
    """

    type: Literal["租車"] = "租車"
    pickup_location: str = ""
    pickup_date: dt.date | None = None
    pickup_time: str = ""
    return_location: str = ""
    return_date: dt.date | None = None
    return_time: str = ""
    is_same_location: bool = False

    def with_mirrored_return(self) -> "CarRentalTransport":
        """Copy pickup location into return location if flagged."""
        if not self.is_same_location:
            return self
        return self.model_copy(update={"return_location": self.pickup_location})


TransportInfo = Annotated[
    FlightTransport | MetroTransport | BusTransport | CarRentalTransport,
    Field(discriminator="type"),
]
