import json

import pytest
from pydantic import ValidationError

from imagery_tasks.models.actions import (
    ActionCopy,
    CopyManifestEntry,
    action_from_json,
    action_to_dict,
    action_to_json,
    make_copy_action,
)


def test_make_copy_action_single_entry() -> None:
    """
    Test the external shape of a copy action.
    """
    action = make_copy_action([{"source": "s3://bucket/a.tif", "target": "s3://bucket/b.tif"}])

    assert action_to_dict(action) == {
        "action": "copy",
        "parameters": {"manifest": [{"source": "s3://bucket/a.tif", "target": "s3://bucket/b.tif"}]},
    }


def test_make_copy_action_preserves_order_and_duplicates() -> None:
    """
    Test that manifest order is kept.

    Verifies:
    - Entries come out in input order
    - Duplicate entries are kept
    - Models and mappings can be mixed
    """
    entries = [
        CopyManifestEntry(source="s3://bucket/c.tif", target="/data/c.tif"),
        {"source": "s3://bucket/a.tif", "target": "/data/a.tif"},
        {"source": "s3://bucket/c.tif", "target": "/data/c.tif"},
    ]
    action = make_copy_action(entries)

    assert [entry.source for entry in action.parameters.manifest] == [
        "s3://bucket/c.tif",
        "s3://bucket/a.tif",
        "s3://bucket/c.tif",
    ]


def test_make_copy_action_empty_manifest() -> None:
    action = make_copy_action([])
    assert action.action == "copy"
    assert action_to_dict(action) == {"action": "copy", "parameters": {"manifest": []}}


def test_copy_action_is_immutable() -> None:
    action = make_copy_action([{"source": "a", "target": "b"}])
    with pytest.raises(ValidationError):
        action.action = "delete"  # type: ignore[misc]


def test_copy_action_json_round_trip() -> None:
    """
    Test that an action parses back to an equal value.
    """
    action = make_copy_action(
        [
            {"source": "s3://bucket/a.tif", "target": "s3://other/a.tif"},
            {"source": "/data/b.tif", "target": "s3://other/b.tif"},
        ]
    )

    document = action_to_json(action)
    assert json.loads(document) == action_to_dict(action)

    parsed = action_from_json(document)
    assert isinstance(parsed, ActionCopy)
    assert parsed == action


def test_action_from_json_accepts_any_field_order() -> None:
    document = '{"parameters": {"manifest": [{"target": "b", "source": "a"}]}, "action": "copy"}'
    parsed = action_from_json(document)
    assert parsed.parameters.manifest[0] == CopyManifestEntry(source="a", target="b")


@pytest.mark.parametrize(
    "document",
    [
        '{"action": "delete", "parameters": {"manifest": []}}',
        '{"action": "copy", "parameters": {"manifest": [{"source": "a"}]}}',
        "not json",
    ],
)
def test_action_from_json_rejects_unknown_documents(document: str) -> None:
    with pytest.raises(ValidationError):
        action_from_json(document)
