"""Storage of copy actions on S3 or the local file system.

Actions are stored as JSON documents rather than passing large manifests
around as workflow parameters.
"""

import base64
import gzip
import hashlib
import json
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

from dagster import get_dagster_logger

from imagery_tasks.config.constants import ACTION_MANIFEST_PREFIX
from imagery_tasks.connectors.s3_client import S3Resource
from imagery_tasks.models.actions import ActionCopy, CopyManifestEntry, S3Action, action_from_json, action_to_json
from imagery_tasks.models.types import is_url, location_scheme, path_or_url_from_string

logger = get_dagster_logger(__name__)


def _manifest_bytes(manifest: list[CopyManifestEntry]) -> bytes:
    return json.dumps(
        [entry.model_dump() for entry in manifest], separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def manifest_hash(manifest: list[CopyManifestEntry]) -> str:
    """Hash a manifest.

    :param manifest: Source/target pairs
    :returns: base64url encoded SHA-256 of the manifest JSON
    """
    return _base64url(hashlib.sha256(_manifest_bytes(manifest)).digest())


def encode_inline_manifest(manifest: list[CopyManifestEntry]) -> str:
    """Encode a manifest to pass it inline when no action location is configured.

    :param manifest: Source/target pairs
    :returns: base64url encoded gzip of the manifest JSON
    """
    return _base64url(gzip.compress(_manifest_bytes(manifest)))


def decode_inline_manifest(encoded: str) -> list[CopyManifestEntry]:
    """Decode a manifest created by :func:`encode_inline_manifest`.

    :param encoded: Encoded manifest
    :returns: Source/target pairs
    """
    padded = encoded + "=" * (-len(encoded) % 4)
    entries: list[dict[str, Any]] = json.loads(gzip.decompress(base64.urlsafe_b64decode(padded)))
    return [CopyManifestEntry.model_validate(entry) for entry in entries]


def _s3_bucket_key(location: str) -> tuple[str, str]:
    parts = urlsplit(location)
    return parts.netloc, parts.path.lstrip("/")


def _local_path(location: str) -> Path:
    if is_url(location):
        return Path(unquote(urlsplit(location).path))
    return Path(location)


def write_document(location: str, body: str, s3: S3Resource | None = None) -> None:
    """Write a text document to S3 or the local file system.

    :param location: S3 URL, file URL or local path
    :param body: Document content
    :param s3: S3 resource, required for S3 locations
    :raises ValueError: If the location cannot be written
    """
    resolved = path_or_url_from_string(location)
    scheme = location_scheme(resolved)

    if scheme == "s3":
        if s3 is None:
            raise ValueError(f"An S3 resource is required to write {resolved}")
        bucket, key = _s3_bucket_key(resolved)
        s3.get_client().put_object(
            Bucket=bucket,
            Key=key,
            Body=body.encode("utf-8"),
            ContentType="application/json",
        )
    elif scheme in ("", "file"):
        path = _local_path(resolved)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
    else:
        raise ValueError(f"Unsupported location: {resolved}")

    logger.debug(f"Written {resolved}")


def read_document(location: str, s3: S3Resource | None = None) -> bytes:
    """Read a document from S3 or the local file system.

    :param location: S3 URL, file URL or local path
    :param s3: S3 resource, required for S3 locations
    :returns: Document content
    :raises ValueError: If the location cannot be read
    """
    resolved = path_or_url_from_string(location)
    scheme = location_scheme(resolved)

    if scheme == "s3":
        if s3 is None:
            raise ValueError(f"An S3 resource is required to read {resolved}")
        bucket, key = _s3_bucket_key(resolved)
        response = s3.get_client().get_object(Bucket=bucket, Key=key)
        content: bytes = response["Body"].read()
        return content
    if scheme in ("", "file"):
        return _local_path(resolved).read_bytes()
    raise ValueError(f"Unsupported location: {resolved}")


def write_action(action: ActionCopy, location: str, s3: S3Resource | None = None) -> str:
    """Store a copy action below an action location.

    The document name is derived from the manifest hash, so storing the same
    manifest twice writes the same document.

    :param action: Copy action
    :param location: Action location
    :param s3: S3 resource, required for S3 locations
    :returns: Location of the stored action
    """
    target_hash = manifest_hash(list(action.parameters.manifest))
    target = f"{location.rstrip('/')}/{ACTION_MANIFEST_PREFIX}{target_hash}.json"
    write_document(target, action_to_json(action), s3)
    logger.info(f"Stored copy action with {len(action.parameters.manifest)} file(s) at {target}")
    return target


def read_action(location: str, s3: S3Resource | None = None) -> S3Action:
    """Load an action document.

    :param location: Location of the stored action
    :param s3: S3 resource, required for S3 locations
    :returns: Parsed action
    :raises pydantic.ValidationError: If the document is not a known action
    """
    return action_from_json(read_document(location, s3))
