from dataclasses import dataclass, field
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Location(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = 0
    name: str = Field(default="", alias="nome")


class Order(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    start_date: str | None = Field(default=None, alias="data_inicio")
    end_date: str | None = Field(default=None, alias="data_termino")
    # Remaining capacity as reported by the API. Not used to decide eligibility.
    vacancies: str | int | None = Field(default=None, alias="vagasCount")
    location: Location = Field(default_factory=Location, alias="localizacao")


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: int
    date: str  # ISO format YYYY-MM-DD
    time: str  # as returned by the API, e.g. "09:00:00"


class BookingRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: int = Field(alias="id_ordem")
    date: str = Field(alias="data")  # YYYY-MM-DDT03:00:00.000Z
    time: str = Field(alias="hora")  # HH:MM


class BookingResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Missing or null fields read as "not booked" so the agendou check decides
    slot_code: str = Field(default="", alias="codigo_vaga")
    booked: int = Field(default=0, alias="agendou")

    @field_validator("slot_code", mode="before")
    @classmethod
    def _null_code(cls, value):
        return "" if value is None else value

    @field_validator("booked", mode="before")
    @classmethod
    def _null_booked(cls, value):
        return 0 if value is None else value


@dataclass
class BookingResult:
    index: int
    slot: TimeSlot
    response: BookingResponse | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None


@dataclass
class RunSummary:
    target_date: str
    selected_slots: List[TimeSlot]
    results: List[BookingResult]
    links: List[str] = field(default_factory=list)

    @property
    def successful(self) -> List[BookingResponse]:
        return [r.response for r in self.results if r.ok]

    @property
    def failed(self) -> List[BookingResult]:
        return [r for r in self.results if not r.ok]

    @property
    def success_count(self) -> int:
        return len(self.successful)
