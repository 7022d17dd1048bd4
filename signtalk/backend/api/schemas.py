"""
Pydantic schemas for API request/response validation.
"""
import math
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VocabularyEntryOut(BaseModel):
    """Vocabulary entry as returned to clients."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    key: str
    category: str
    media_url: str = Field(alias="mediaUrl")


class SnapshotEntry(BaseModel):
    """All training examples of one label, flattened."""
    values: List[float]
    shape: List[int]  # [n_examples, n_features]

    @model_validator(mode="after")
    def check_shape(self):
        if any(dim < 0 for dim in self.shape):
            raise ValueError("shape dimensions must be non-negative")
        if self.shape and math.prod(self.shape) != len(self.values):
            raise ValueError(
                f"shape {self.shape} does not match {len(self.values)} values"
            )
        return self


ClassifierSnapshot = Dict[str, SnapshotEntry]


class MessageResponse(BaseModel):
    """Confirmation message."""
    message: str


class HealthResponse(BaseModel):
    """Health check payload."""
    status: str
    vocabulary_entries: int
    snapshot_saved: bool


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
