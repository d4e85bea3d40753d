from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from todolist.models import Urgency
from todolist.utils import parse_due_date

# Fields that may be omitted from an update but never set to null
NON_NULLABLE_UPDATE_FIELDS = ("title", "description", "completed", "urgency")


class TodoCreate(BaseModel):
    """
    Body of POST /todos.

    title/description are optional at the schema level so the route can
    answer a missing value with its own 400 message.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "<p>2%</p>",
                "dueDate": "2025-02-01",
                "urgency": "High",
            }
        },
    )

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    urgency: Optional[Urgency] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Any) -> Optional[datetime]:
        return parse_due_date(v)


class TodoUpdate(BaseModel):
    """
    Body of PUT /todos?id=<id>. Every field is optional.

    Only fields present in the request end up in the patch: an omitted
    dueDate leaves the stored value alone, ``"dueDate": null`` clears it.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    urgency: Optional[Urgency] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        s = v.strip()
        if not s:
            raise ValueError("title must not be blank")
        return s

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("description must not be blank")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Any) -> Optional[datetime]:
        return parse_due_date(v)

    @model_validator(mode="after")
    def reject_nulls(self) -> "TodoUpdate":
        nulled = [
            name
            for name in NON_NULLABLE_UPDATE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self

    def to_patch(self) -> Dict[str, Any]:
        """Presence-checked mapping of just the fields the client sent."""
        return self.model_dump(exclude_unset=True)


class TodoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    completed: bool
    due_date: Optional[datetime] = Field(default=None, serialization_alias="dueDate")
    urgency: Urgency


class MessageOut(BaseModel):
    message: str
