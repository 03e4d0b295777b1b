"""Content slot aggregate and API schemas."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


@dataclass
class ContentSlot:
    """A component-bound region on a view's layout grid, with its options."""
    id: int
    view_id: int
    component_type: str
    column_start: int
    row_start: int
    column_end: int
    row_end: int
    options: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'view_id': self.view_id,
            'component_type': self.component_type,
            'column_start': self.column_start,
            'row_start': self.row_start,
            'column_end': self.column_end,
            'row_end': self.row_end,
            'options': dict(self.options)
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ContentSlot':
        """Create from dictionary."""
        data = dict(data)
        data['options'] = dict(data.get('options') or {})
        return cls(**data)


class ContentSlotPayload(BaseModel):
    """Request body for creating or replacing a content slot."""
    view_id: int
    component_type: str = Field(min_length=1)
    column_start: int = Field(ge=1)
    row_start: int = Field(ge=1)
    column_end: int = Field(ge=2)
    row_end: int = Field(ge=2)
    options: Dict[str, str] = Field(default_factory=dict)


class ContentSlotResponse(BaseModel):
    """Content slot as returned by the API."""
    id: int
    view_id: int
    component_type: str
    column_start: int
    row_start: int
    column_end: int
    row_end: int
    options: Dict[str, str]


class ContentSlotIdResponse(BaseModel):
    """Identifier of a written slot; None when nothing changed."""
    id: Optional[int] = None


class ContentSlotListResponse(BaseModel):
    content_slots: List[ContentSlotResponse]


class HealthResponse(BaseModel):
    status: str
    database: str


class ErrorResponse(BaseModel):
    """Response model for storage errors."""
    status: str = "error"
    error: str
    code: Optional[str] = None
