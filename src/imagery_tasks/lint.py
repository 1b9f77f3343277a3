"""Lint imagery S3 paths against the allowed buckets, regions, products and CRS."""

from dagster import get_dagster_logger

from imagery_tasks.config.constants import IMAGERY_BUCKET_NAMES, IMAGERY_CRS, IMAGERY_PRODUCTS, REGIONS

logger = get_dagster_logger(__name__)


class LintError(ValueError):
    """Base class for path lint failures."""


class MissingKeyError(LintError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Missing Key in Path: {path}")


class AdditionalKeyError(LintError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Additional arguments in path: {path}")


class InvalidKeyError(LintError):
    def __init__(self, key_type: str, value: str) -> None:
        super().__init__(f"{key_type} not in {key_type} list: {value}")
        self.key_type = key_type
        self.value = value


def lint_path(path: str) -> None:
    """Lint an imagery path of the form ``s3://<bucket>/<region>/<dataset>/<product>/<crs>/``.

    :param path: S3 path to check
    :raises MissingKeyError: If a path segment is missing or empty
    :raises AdditionalKeyError: If the path continues after the CRS
    :raises InvalidKeyError: If a segment is not an allowed value
    """
    parts = path.replace("s3://", "", 1).split("/", 4)
    if len(parts) < 5 or any(part == "" for part in parts):
        raise MissingKeyError(path)

    bucket, region, _dataset, product, remainder = parts
    crs = remainder.split("/", 1)[0]
    if remainder != f"{crs}/":
        raise AdditionalKeyError(path)

    logger.debug(f"Linting {path}: bucket={bucket} region={region} product={product} crs={crs}")
    if bucket not in IMAGERY_BUCKET_NAMES:
        raise InvalidKeyError("Bucket", bucket)
    lint_imagery_path(region, product, crs)


def lint_imagery_path(region: str, product: str, crs: str) -> None:
    """Lint the region, product and CRS of an imagery path.

    :param region: Region slug
    :param product: Imagery product
    :param crs: EPSG code
    :raises InvalidKeyError: If a value is not allowed
    """
    if region not in REGIONS:
        raise InvalidKeyError("region", region)
    if product not in IMAGERY_PRODUCTS:
        raise InvalidKeyError("product", product)
    if crs not in IMAGERY_CRS:
        raise InvalidKeyError("crs", crs)
