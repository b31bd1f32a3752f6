"""
Models for the availability endpoint and the enriched blocked-vehicle output.

The endpoint is undocumented and its JSON shape drifts, so every model is
lenient: unknown fields are kept, nulls and blank strings fall back to field
defaults, numbers are accepted for text fields, absent arrays decode as empty
lists and array entries that still fail validation are skipped one by one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


class _LenientModel(BaseModel):
    model_config = ConfigDict(
        extra="allow", populate_by_name=True, coerce_numbers_to_str=True
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blanks(cls, data: Any) -> Any:
        # Let declared defaults apply when the backend sends null or ""
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if not ((value is None or value == "") and key in cls.model_fields)
            }
        return data


class VehicleMetadata(_LenientModel):
    """Vehicle details from the ``rcmcarsize`` array, keyed by ``carid``."""

    carid: int | None = None
    make: str = ""
    model: str = ""
    year: int | None = None
    colour: str = ""
    fleetno: str = ""
    size: str = ""
    rego: str = ""


class AvailabilityRow(_LenientModel):
    """One booking entry from the ``rcmbooking`` array."""

    reservationno: int = 0
    resbufferno: int = 0
    reservationtypeid: int = 0
    pickupdatetime: str = ""
    dropoffdatetime: str = ""
    pickuplocation: str = ""
    dropofflocation: str = ""
    carid: int | None = None
    rentaldays: int | float = 0
    registrationno: str = ""
    currentrcmregistrationno: str = ""
    aclastname: str = ""
    isdonotmove: bool = False

    @property
    def identity_key(self) -> str:
        """Reservation number when assigned, else the buffer number."""
        if self.reservationno > 0:
            return f"res-{self.reservationno}"
        return f"buf-{self.resbufferno}"


class CarDataSummary(_LenientModel):
    totcars: int = 0
    numofrows: int = 0


class AvailabilityResponse(_LenientModel):
    """Decoded body of one ``loadcardata.ashx?mode=availability`` page."""

    rcmbooking: list[AvailabilityRow] = Field(default_factory=list)
    rcmcarsize: list[VehicleMetadata] = Field(default_factory=list)
    rcmcardata: list[CarDataSummary] = Field(default_factory=list)

    @field_validator("rcmbooking", "rcmcarsize", "rcmcardata", mode="before")
    @classmethod
    def _skip_invalid_entries(cls, value: Any, info: ValidationInfo) -> list[Any]:
        """Validate entries one by one so a malformed entry costs only itself."""
        if not isinstance(value, list):
            return []

        item_model = _ARRAY_ITEM_MODELS[info.field_name]
        entries = []
        for index, entry in enumerate(value):
            try:
                entries.append(item_model.model_validate(entry))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed {info.field_name}[{index}]: {e.errors()[0]['msg']}"
                )
        return entries

    @property
    def total_rows(self) -> int:
        if not self.rcmcardata:
            return 0
        return self.rcmcardata[0].totcars


_ARRAY_ITEM_MODELS: dict[str, type[_LenientModel]] = {
    "rcmbooking": AvailabilityRow,
    "rcmcarsize": VehicleMetadata,
    "rcmcardata": CarDataSummary,
}


class BlockedReservation(AvailabilityRow):
    """A maintenance row joined with its vehicle metadata."""

    categoryid: int | None = None
    car_details: VehicleMetadata | None = Field(default=None, alias="carDetails")


@dataclass
class CategoryError:
    """A category that contributed no rows because its fetch failed."""

    category_id: int
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"catId": self.category_id, "error": self.error}


@dataclass
class BlockedVehiclesResult:
    """Flattened blocked reservations plus per-category failures."""

    data: list[BlockedReservation] = field(default_factory=list)
    errors: list[CategoryError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "data": [item.model_dump(by_alias=True) for item in self.data]
        }
        if self.errors:
            result["errors"] = [error.to_dict() for error in self.errors]
        return result
