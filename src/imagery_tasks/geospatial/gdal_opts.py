"""GDAL resampling options and command construction.

Commands are only built here, running them is left to the caller.
"""

from dataclasses import dataclass, field
from typing import Literal, TypeGuard, get_args
from urllib.parse import unquote, urlsplit

from rasterio.enums import Resampling

from imagery_tasks.models.types import PathString, UrlString, is_url, path_or_url_from_string

ResamplingMethod = Literal["nearest", "bilinear", "cubic", "cubicspline", "lanczos", "average", "mode"]

RESAMPLING_OPTIONS: tuple[str, ...] = get_args(ResamplingMethod)

# rasterio spells some GDAL names differently
_RASTERIO_NAMES: dict[str, str] = {"cubicspline": "cubic_spline"}

DEFAULT_TRIM_PIXEL_RIGHT = 1.7


class InvalidResamplingMethodError(ValueError):
    """Raised when a resampling method is not supported by GDAL."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Invalid resampling method: {method!r}, expected one of {', '.join(RESAMPLING_OPTIONS)}")
        self.method = method


def is_valid_resampling_method(method: str) -> TypeGuard[ResamplingMethod]:
    """Check a resampling method against the methods GDAL supports.

    The check is exact and case-sensitive.

    :param method: Resampling method
    :returns: True if the method is supported
    """
    return method in RESAMPLING_OPTIONS


def to_rasterio_resampling(method: str) -> Resampling:
    """Map a resampling method to its rasterio equivalent.

    :param method: Resampling method
    :returns: Rasterio resampling enum member
    :raises InvalidResamplingMethodError: If the method is not supported
    """
    if not is_valid_resampling_method(method):
        raise InvalidResamplingMethodError(method)
    return Resampling[_RASTERIO_NAMES.get(method, method)]


@dataclass
class GdalCommand:
    """A GDAL command line, ready to be run by a GDAL runner.

    :param command: GDAL executable
    :param output: Location written by the command
    :param args: Arguments passed to the executable
    """

    command: str
    output: str
    args: list[str] = field(default_factory=list)

    def to_argv(self) -> list[str]:
        """Full argument vector including the executable."""
        return [self.command, *self.args]


def location_to_gdal_path(location: PathString | UrlString | str) -> str:
    """Convert a location into a path GDAL can open.

    :param location: Local path or URL
    :returns: ``/vsis3/`` path for S3, local path for file URLs, otherwise unchanged
    """
    if not is_url(location):
        return location
    resolved = path_or_url_from_string(location)
    parts = urlsplit(resolved)
    if parts.scheme == "s3":
        return f"/vsis3/{parts.netloc}{parts.path}"
    if parts.scheme == "file":
        return unquote(parts.path)
    return resolved


def _resampling_args(resampling: str | None) -> list[str]:
    if resampling is None:
        return []
    if not is_valid_resampling_method(resampling):
        raise InvalidResamplingMethodError(resampling)
    return ["-r", resampling]


def gdal_translate_command(
    input_location: str,
    output_location: str,
    resampling: str | None = None,
    width: int | None = None,
    height: int | None = None,
    pixel_trim: float = DEFAULT_TRIM_PIXEL_RIGHT,
) -> GdalCommand:
    """Build a ``gdal_translate`` command that writes a Cloud Optimized GeoTIFF.

    When ``width`` and ``height`` are given, ``pixel_trim`` pixels are removed
    from the right side of the imagery.

    :param input_location: Source raster
    :param output_location: COG to write
    :param resampling: Optional resampling method
    :param width: Source width in pixels
    :param height: Source height in pixels
    :param pixel_trim: Pixels to remove from the right side
    :returns: GDAL command
    :raises InvalidResamplingMethodError: If the resampling method is not supported
    """
    args = ["-q", "-stats", "-of", "COG"]
    if width is not None and height is not None:
        args += ["-srcwin", "0", "0", f"{width - pixel_trim}", f"{height}"]
    args += _resampling_args(resampling)
    args += [
        "-co", "BIGTIFF=NO",
        "-co", "BLOCKSIZE=512",
        "-co", "COMPRESS=WEBP",
        "-co", "NUM_THREADS=ALL_CPUS",
        "-co", "OVERVIEW_COMPRESS=WEBP",
        "-co", "OVERVIEWS=IGNORE_EXISTING",
        "-co", "OVERVIEW_QUALITY=90",
        "-co", "OVERVIEW_RESAMPLING=LANCZOS",
        "-co", "QUALITY=100",
        "-co", "SPARSE_OK=TRUE",
        "-co", "ADD_ALPHA=YES",
    ]  # fmt: skip
    args += [location_to_gdal_path(input_location), location_to_gdal_path(output_location)]
    return GdalCommand(command="gdal_translate", output=output_location, args=args)


def gdal_build_vrt_warp_command(
    target_vrt: str, source_vrt: str, source_epsg: int | str, resampling: str | None = None
) -> GdalCommand:
    """Build a ``gdalwarp`` command that reprojects into a VRT.

    :param target_vrt: VRT to write
    :param source_vrt: VRT to read
    :param source_epsg: EPSG code of the source
    :param resampling: Optional resampling method
    :returns: GDAL command
    :raises InvalidResamplingMethodError: If the resampling method is not supported
    """
    args = ["-multi", "-of", "vrt", "-wo", "NUM_THREADS=ALL_CPUS", "-s_srs", f"EPSG:{source_epsg}"]
    args += _resampling_args(resampling)
    args += [location_to_gdal_path(source_vrt), location_to_gdal_path(target_vrt)]
    return GdalCommand(command="gdalwarp", output=target_vrt, args=args)


def gdal_build_vrt_command(target_vrt: str, sources: list[str]) -> GdalCommand:
    """Build a ``gdalbuildvrt`` command.

    :param target_vrt: VRT to write
    :param sources: Rasters to include
    :returns: GDAL command
    :raises ValueError: If no sources are given
    """
    if not sources:
        raise ValueError(f"No source files given for: {target_vrt}")
    args = ["-addalpha", location_to_gdal_path(target_vrt), *(location_to_gdal_path(s) for s in sources)]
    return GdalCommand(command="gdalbuildvrt", output=target_vrt, args=args)
