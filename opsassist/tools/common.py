"""Input models shared by the domain tool adapters."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class NoArguments(BaseModel):
    """Input of tools that take no parameters."""

    model_config = ConfigDict(extra="ignore")


class RecordId(BaseModel):
    id: uuid.UUID = Field(description="Unique identifier (UUID) of the record.")


def deleted_message(kind: str, record_id: object) -> dict[str, str]:
    return {"message": f"{kind} with ID {record_id} has been deleted."}
