"""Schemas returned by the transcription endpoints."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TranscriptionResponse(BaseModel):
    status: Literal["success"] = "success"
    generated_content: str = Field(serialization_alias="generatedContent")

    model_config = ConfigDict(populate_by_name=True)


class TranslationResponse(TranscriptionResponse):
    timestamp: str


class ProcessingErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
