# speechtxt/schemas/__init__.py
# ==============================
# Response / record models
#
# TranscriptionRecord is the persisted row as returned by the API.
# JSON keys are camelCase (audioUrl, fileName, createdByEmail, ...).

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TranscriptionRecord(BaseModel):
    """One stored transcription."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    audio_url: str = Field(alias="audioUrl")
    text: str
    file_name: str = Field(alias="fileName")
    created_by_email: str = Field(alias="createdByEmail")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


__all__ = ["TranscriptionRecord"]
