import pytest

from imagery_tasks.lint import AdditionalKeyError, InvalidKeyError, LintError, MissingKeyError, lint_imagery_path, lint_path


def test_lint_path_incorrect_bucket_name() -> None:
    with pytest.raises(InvalidKeyError, match="Bucket not in Bucket list: n-imagery"):
        lint_path("s3://n-imagery/auckland/auckland_2012_0.075m/rgb/2193/")


def test_lint_path_missing_product() -> None:
    with pytest.raises(MissingKeyError):
        lint_path("s3://nz-imagery/auckland/auckland_2012_0.075m/2193/")


def test_lint_path_extra_args() -> None:
    with pytest.raises(AdditionalKeyError):
        lint_path("s3://nz-imagery/auckland/auckland_2012_0.075m/rgb/2193/extra-args/")


def test_lint_path_missing_trailing_slash() -> None:
    with pytest.raises(AdditionalKeyError):
        lint_path("s3://nz-imagery/auckland/auckland_2012_0.075m/rgb/2193")


def test_lint_path_valid() -> None:
    lint_path("s3://nz-imagery/auckland/auckland_2012_0.075m/rgb/2193/")
    lint_path("s3://linz-imagery/hawkes-bay/hawkes-bay_2022_0.1m/rgb/2193/")


@pytest.mark.parametrize(
    ("region", "product", "crs", "key_type"),
    [
        ("hawkesbay", "rgb", "2193", "region"),
        ("hawkes-bay", "rgbi", "2193", "product"),
        ("auckland", "rgb", "219", "crs"),
    ],
)
def test_lint_imagery_path_invalid(region: str, product: str, crs: str, key_type: str) -> None:
    """
    Test each invalid segment of an imagery path.

    Verifies the error names the offending key and value.
    """
    with pytest.raises(InvalidKeyError) as exc_info:
        lint_imagery_path(region, product, crs)
    assert exc_info.value.key_type == key_type
    assert isinstance(exc_info.value, LintError)


def test_lint_imagery_path_valid() -> None:
    lint_imagery_path("auckland", "rgb", "2193")
