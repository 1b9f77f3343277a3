"""Action documents handed to the copy executor."""

from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from imagery_tasks.models.types import JSONString


class CopyManifestEntry(BaseModel):
    """One object to copy.

    :param source: Location to copy from
    :param target: Location to copy to
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Location to copy from")
    target: str = Field(..., description="Location to copy to")


class CopyParameters(BaseModel):
    """Parameters of a copy action.

    :param manifest: Ordered source/target pairs
    """

    model_config = ConfigDict(frozen=True)

    manifest: tuple[CopyManifestEntry, ...] = Field(default=(), description="Ordered source/target pairs")


class ActionCopy(BaseModel):
    """Batch copy request, consumed by an executor."""

    model_config = ConfigDict(frozen=True)

    action: Literal["copy"] = Field(default="copy", description="Action discriminant")
    parameters: CopyParameters = Field(default_factory=CopyParameters, description="Copy parameters")


# Further action kinds become a union discriminated on "action"
S3Action = ActionCopy

_S3_ACTION_ADAPTER: TypeAdapter[S3Action] = TypeAdapter(S3Action)


def make_copy_action(manifest: Iterable[CopyManifestEntry | Mapping[str, Any]]) -> ActionCopy:
    """Create a copy action from source/target pairs.

    Order is kept, an empty manifest is allowed.

    :param manifest: Source/target pairs
    :returns: Copy action
    """
    entries = tuple(
        entry if isinstance(entry, CopyManifestEntry) else CopyManifestEntry.model_validate(entry)
        for entry in manifest
    )
    return ActionCopy(parameters=CopyParameters(manifest=entries))


def action_to_json(action: ActionCopy) -> JSONString:
    """Serialize an action to its JSON document.

    :param action: Action to serialize
    :returns: JSON document
    """
    return JSONString(action.model_dump_json())


def action_to_dict(action: ActionCopy) -> dict[str, Any]:
    """Convert an action to plain JSON-compatible data.

    :param action: Action to convert
    :returns: Dictionary with lists in place of tuples
    """
    return action.model_dump(mode="json")


def action_from_json(data: str | bytes) -> S3Action:
    """Parse an action document.

    :param data: JSON document
    :returns: Parsed action
    :raises pydantic.ValidationError: If the document is not a known action
    """
    return _S3_ACTION_ADAPTER.validate_json(data)
