"""Pydantic schemas for user preferences."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.utils import ensure_utc


class Preference(BaseModel):
    """A stored preference as seen by the service and its callers."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    key: str = Field(validation_alias="preference_key")
    value: str = Field(validation_alias="preference_value")
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class GetPreferenceResponse(BaseModel):
    """Response for a single preference lookup."""

    key: str
    value: str


class GetPreferencesResponse(BaseModel):
    """Response listing every preference of the caller, ordered by key."""

    preferences: list[Preference]


class UpsertPreferencesRequest(BaseModel):
    """Request body for creating or updating a batch of preferences."""

    preferences: dict[str, str] | None = None


class UpsertPreferencesResponse(BaseModel):
    """Keys written by an upsert. Order is not significant."""

    updated_keys: list[str]


class DeletePreferenceResponse(BaseModel):
    """Confirmation returned after a delete."""

    message: str


class ErrorResponse(BaseModel):
    """Body returned for every service error."""

    code: str
    message: str
    description: str
