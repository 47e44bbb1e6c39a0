"""
Strict shapes for what the LLM is asked to return.

Anything that does not fit is a ValidationError, which callers treat as a
failed generation.
"""
from datetime import date as dt_date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ProposedSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: dt_date
    day_of_week: Optional[int] = Field(default=None, ge=1, le=7)
    session_type: str = "Generated Workout"
    distance: Optional[float] = None
    time: Optional[float] = None
    notes: str = ""
    week_number: Optional[int] = Field(default=None, ge=1)
    phase: Optional[str] = None
    suggested_location: Optional[str] = None

    @field_validator("distance", "time", mode="before")
    @classmethod
    def _numbers(cls, value):
        return _coerce_number(value)

    @field_validator("session_type", mode="before")
    @classmethod
    def _session_type(cls, value):
        if value is None or not str(value).strip():
            return "Generated Workout"
        return str(value).strip()

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value):
        return "" if value is None else str(value)


class WeekProposal(BaseModel):
    sessions: List[ProposedSession] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data):
        if isinstance(data, list):
            data = {"sessions": data}
        if isinstance(data, dict):
            items = data.get("sessions") or data.get("plan") or []
            if isinstance(items, list):
                # Items without a date cannot be placed in the week.
                data = {"sessions": [i for i in items if isinstance(i, dict) and i.get("date")]}
        return data


class AdjustmentProposal(BaseModel):
    model_config = ConfigDict(extra="ignore")

    week: int = Field(ge=1)
    date: dt_date
    session_type: str = Field(min_length=1)
    new_notes: str
    new_distance: float = Field(ge=0)
    new_time: float = Field(ge=0)
    new_date: Optional[dt_date] = None

    @field_validator("new_date", mode="before")
    @classmethod
    def _blank_new_date(cls, value):
        if value in ("", "null", "None"):
            return None
        return value
