"""Typed, read-only views of NexHealth records.

Each model keeps whatever extra fields the API sends (``extra="allow"``) and
treats every field as optional, so an unexpected payload never fails
validation. Amount fields are integer cents.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NexHealthRecord(BaseModel):
    model_config = ConfigDict(
        extra="allow", populate_by_name=True, coerce_numbers_to_str=True
    )

    id: int | str | None = None


class PatientBio(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    phone_number: str | None = None
    date_of_birth: str | None = None


class Patient(NexHealthRecord):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    bio: PatientBio | None = None
    created_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def phone_number(self) -> str | None:
        return self.bio.phone_number if self.bio else None

    @property
    def date_of_birth(self) -> str | None:
        return self.bio.date_of_birth if self.bio else None


class Appointment(NexHealthRecord):
    patient_id: int | str | None = None
    provider_id: int | str | None = None
    start_time: str | None = None
    end_time: str | None = None
    confirmed: bool | None = None


class Provider(NexHealthRecord):
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    provider_type: str | None = None
    inactive: bool | None = None

    @property
    def active(self) -> bool:
        """NexHealth reports ``inactive``; the tools display the inverse."""
        return not self.inactive

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Location(NexHealthRecord):
    name: str | None = None
    address_line_1: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    phone_number: str | None = None


class Charge(NexHealthRecord):
    patient_id: int | str | None = None
    amount: int | None = None
    description: str | None = None
    date: str | None = None
    created_at: str | None = None
    status: str | None = None


class Payment(NexHealthRecord):
    patient_id: int | str | None = None
    amount: int | None = None
    payment_method: str | None = None
    date: str | None = None
    created_at: str | None = None


class Procedure(NexHealthRecord):
    patient_id: int | str | None = None
    code: str | None = None
    description: str | None = None
    fee: int | None = None
    status: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class Slot(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    time: str | None = None
    end_time: str | None = None
    operatory_id: int | str | None = None


class SlotGroup(BaseModel):
    """Open slots for one location/provider pair."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    location_id: int | str | None = Field(default=None, alias="lid")
    provider_id: int | str | None = Field(default=None, alias="pid")
    slots: list[Slot] = Field(default_factory=list)


class BalanceResult(BaseModel):
    """Either a patient's balance or the reason it could not be fetched."""

    patient: Patient
    balance: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BillingSummary(BaseModel):
    total_charges: int
    total_payments: int

    @property
    def balance_due(self) -> int:
        return self.total_charges - self.total_payments


class PatientDetails(BaseModel):
    """Composite returned by the dashboard's patient detail endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    patient: Any = None
    procedures: Any = Field(default_factory=list)
    charges: Any = Field(default_factory=list)
    payments: Any = Field(default_factory=list)
    procedure_count: int = Field(default=0, alias="procedureCount")
    charge_count: int = Field(default=0, alias="chargeCount")
    payment_count: int = Field(default=0, alias="paymentCount")
