"""Build copy manifests from a listing of source locations."""

import math
import posixpath
import re
from collections.abc import Generator, Iterable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

from dagster import get_dagster_logger

from imagery_tasks.config.constants import DEFAULT_MANIFEST_GROUP
from imagery_tasks.connectors.s3_client import S3Resource
from imagery_tasks.models.actions import CopyManifestEntry
from imagery_tasks.models.types import is_url, location_scheme, path_or_url_from_string

logger = get_dagster_logger(__name__)

FILE_SIZE_UNITS: dict[str, int] = {
    "kb": 1024,
    "mb": 1024**2,
    "gb": 1024**3,
    "tb": 1024**4,
    "ki": 1000,
    "mi": 1000**2,
    "gi": 1000**3,
    "ti": 1000**4,
}


class PathMismatchError(ValueError):
    """Raised when a source and its target are not both files or both directories."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Path Mismatch - source: {source}, target: {target}")


@dataclass
class FileInfo:
    """A listed file.

    :param url: Location of the file
    :param size: Size in bytes when known
    """

    url: str
    size: int | None = None


@dataclass
class ManifestFilter:
    """Selection and grouping of listed files.

    :param include: Regex a file name must match
    :param exclude: Regex a file name must not match
    :param limit: Maximum number of files, disabled when not positive
    :param size_min: Files of a known size below this are skipped
    :param group: Maximum files per manifest
    :param group_size: Maximum bytes per manifest
    :param flatten: Copy every file directly into the target
    """

    include: str | None = None
    exclude: str | None = None
    limit: int = -1
    size_min: int = 1
    group: int | None = DEFAULT_MANIFEST_GROUP
    group_size: int | None = None
    flatten: bool = False


def parse_size(size: str) -> int:
    """Convert a size such as ``"1KB"`` or ``"5Gi"`` to bytes.

    ``kb``/``mb``/``gb``/``tb`` are powers of 1024, ``ki``/``mi``/``gi``/``ti``
    powers of 1000. Rounded to the nearest byte.

    :param size: Size string
    :returns: Size in bytes
    :raises ValueError: If the size cannot be parsed
    """
    text = size.lower().replace(" ", "").strip()
    try:
        if text.endswith(("i", "b")):
            unit = FILE_SIZE_UNITS.get(text[-2:])
            if unit is None:
                raise ValueError(f"Unknown unit {text[-2:]!r}")
            value = unit * float(text[:-2])
        else:
            value = float(text)
        if not math.isfinite(value):
            raise ValueError(f"Not a finite size {value}")
        return round(value)
    except ValueError as e:
        raise ValueError(f"Failed to parse: {size} as a file size") from e


def _split_s3_location(location: str) -> tuple[str, str]:
    parts = urlsplit(location)
    return parts.netloc, parts.path.lstrip("/")


def _list_s3_files(s3: S3Resource, location: str) -> Generator[FileInfo, None, None]:
    bucket, prefix = _split_s3_location(location)
    s3_client = s3.get_client()

    paginator = s3_client.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
        for obj in page.get("Contents", []):
            yield FileInfo(url=f"s3://{bucket}/{obj['Key']}", size=obj.get("Size"))


def _list_local_files(location: str) -> Generator[FileInfo, None, None]:
    root = Path(unquote(urlsplit(location).path)) if is_url(location) else Path(location)

    if root.is_file():
        yield FileInfo(url=location, size=root.stat().st_size)
        return

    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        yield FileInfo(url=_join(location, path.relative_to(root).as_posix()), size=path.stat().st_size)


def list_files(location: str, s3: S3Resource | None = None) -> Generator[FileInfo, None, None]:
    """List files below a location.

    :param location: S3 URL, file URL or local path
    :param s3: S3 resource, required for S3 locations
    :yields: Listed files
    :raises ValueError: If the location scheme is not supported
    """
    resolved = path_or_url_from_string(location)
    scheme = location_scheme(resolved)

    logger.debug(f"Listing files in {resolved}")
    if scheme == "s3":
        if s3 is None:
            raise ValueError(f"An S3 resource is required to list {resolved}")
        yield from _list_s3_files(s3, resolved)
    elif scheme in ("", "file"):
        yield from _list_local_files(resolved)
    else:
        raise ValueError(f"Unsupported location: {resolved}")


def filter_files(
    files: Iterable[FileInfo], include: str | None = None, exclude: str | None = None
) -> Generator[FileInfo, None, None]:
    """Filter files on their base name, case-insensitively.

    :param files: Listed files
    :param include: Regex a name must match
    :param exclude: Regex a name must not match, wins over include
    :yields: Selected files
    """
    include_re = re.compile(include, re.IGNORECASE) if include else None
    exclude_re = re.compile(exclude, re.IGNORECASE) if exclude else None

    for file in files:
        name = posixpath.basename(file.url)
        if exclude_re and exclude_re.search(name):
            continue
        if include_re is None or include_re.search(name):
            yield file


def chunk_files(files: Iterable[FileInfo], count: int | None = None, size: int | None = None) -> list[list[str]]:
    """Group files by count and/or total size, whichever is reached first.

    :param files: Files to group
    :param count: Maximum files per group, disabled when not positive
    :param size: Maximum bytes per group, disabled when not positive
    :returns: Groups of file locations
    """
    if count is None and size is None:
        return [[file.url for file in files]]

    output: list[list[str]] = []
    current: list[str] = []
    total_size = 0
    for file in files:
        current.append(file.url)
        total_size += file.size or 0
        if (count is not None and count > 0 and len(current) >= count) or (
            size is not None and size > 0 and total_size >= size
        ):
            output.append(current)
            current = []
            total_size = 0

    if current:
        output.append(current)
    return output


def validate_paths(source: str, target: str) -> None:
    """Check that source and target are both directories or both files.

    :param source: Source location
    :param target: Target location
    :raises PathMismatchError: If one is a directory and the other is not
    """
    if source.endswith("/") != target.endswith("/"):
        raise PathMismatchError(source, target)


def _join(base: str, name: str) -> str:
    if not name:
        return base
    return f"{base.rstrip('/')}/{name.lstrip('/')}"


def create_manifest(
    source: str,
    target: str,
    manifest_filter: ManifestFilter | None = None,
    s3: S3Resource | None = None,
) -> list[list[CopyManifestEntry]]:
    """Create the copy manifests for every file below ``source``.

    Each file keeps its path relative to ``source`` below ``target``, or only
    its base name when flattening.

    :param source: Location to list
    :param target: Copy destination
    :param manifest_filter: Selection and grouping options
    :param s3: S3 resource, required for S3 locations
    :returns: One list of source/target pairs per group
    :raises PathMismatchError: If a pair mixes a directory and a file
    """
    manifest_filter = manifest_filter or ManifestFilter()
    source = path_or_url_from_string(source)

    selected = filter_files(list_files(source, s3), manifest_filter.include, manifest_filter.exclude)
    files = [f for f in selected if f.size is None or f.size >= manifest_filter.size_min]
    if manifest_filter.limit > 0:
        files = files[: manifest_filter.limit]

    chunks = chunk_files(files, manifest_filter.group, manifest_filter.group_size)

    output: list[list[CopyManifestEntry]] = []
    for chunk in chunks:
        current: list[CopyManifestEntry] = []
        for file_url in chunk:
            if manifest_filter.flatten:
                name = posixpath.basename(file_url)
            else:
                name = file_url[len(source) :] if file_url.startswith(source) else posixpath.basename(file_url)
            file_target = _join(target, name)
            validate_paths(file_url, file_target)
            current.append(CopyManifestEntry(source=file_url, target=file_target))
        output.append(current)

    logger.info(f"Created {len(output)} manifest(s) from {source} to {target}")
    return output
