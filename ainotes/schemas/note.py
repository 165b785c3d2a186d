"""
Note Schemas.

Pydantic models for notes, their identities, and the field sets accepted
by create and update.

A note identity is a tagged union: TemporaryId for notes that only exist on
this device, PersistedId for notes the remote store has assigned an id to.
The tag is stored with the note, so a remote id can never be mistaken for a
local one regardless of its content.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ainotes.core.utils import new_token, to_naive_utc

DEFAULT_COLOR = "transparent"


class TemporaryId(BaseModel):
    """Identity generated locally before the first successful remote insert."""

    kind: Literal["temporary"] = "temporary"
    token: str = Field(default_factory=new_token)

    model_config = ConfigDict(frozen=True)

    @property
    def is_temporary(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"temp-{self.token}"


class PersistedId(BaseModel):
    """Identity assigned by the remote store."""

    kind: Literal["persisted"] = "persisted"
    value: str

    model_config = ConfigDict(frozen=True)

    @property
    def is_temporary(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.value


NoteId = Annotated[Union[TemporaryId, PersistedId], Field(discriminator="kind")]


class Note(BaseModel):
    """A note as held in the local cache and returned to callers."""

    id: NoteId = Field(description="Local or remote identity")
    user_id: str = Field(description="Owner identity")
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note content")
    is_pinned: bool = Field(default=False, description="Pinned notes sort first")
    is_archived: bool = Field(default=False, description="Hidden from the main listing")
    created_at: datetime = Field(description="Creation timestamp (naive UTC)")
    updated_at: datetime = Field(description="Last update timestamp (naive UTC)")
    color: str = Field(default=DEFAULT_COLOR, description="Display tag")
    is_synced: bool = Field(
        default=False,
        description="True only when the remote store confirmed this state",
    )

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("color", mode="before")
    @classmethod
    def _default_color(cls, value: Any) -> Any:
        return DEFAULT_COLOR if value is None else value

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @classmethod
    def from_remote(cls, row: dict[str, Any]) -> "Note":
        """
        Build a synced note from a remote store row.

        The row's plain string id becomes a PersistedId. Unknown columns are
        ignored.

        Args:
            row: Mapping as returned by the remote store

        Returns:
            Note with is_synced=True
        """
        data = dict(row)
        data["id"] = PersistedId(value=str(data["id"]))
        data["is_synced"] = True
        return cls.model_validate(data)


class NoteCreate(BaseModel):
    """Fields accepted when creating a note."""

    title: str = Field(default="", description="Note title", examples=["Groceries"])
    content: str = Field(default="", description="Note content", examples=["Milk, eggs"])
    is_pinned: bool = Field(default=False, description="Pin on creation")
    color: str = Field(default=DEFAULT_COLOR, description="Display tag")

    model_config = ConfigDict(extra="forbid")

    @field_validator("title", "content", mode="after")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @property
    def is_blank(self) -> bool:
        """True when both title and content are empty."""
        return not self.title and not self.content


class NoteUpdate(BaseModel):
    """The fields of a note that may be changed after creation."""

    title: str | None = Field(default=None, description="Note title")
    content: str | None = Field(default=None, description="Note content")
    is_pinned: bool | None = Field(default=None, description="Pin status")
    is_archived: bool | None = Field(default=None, description="Archive status")
    color: str | None = Field(default=None, description="Display tag")

    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict[str, Any]:
        """Only the fields that were explicitly set to a value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)
