import pytest

from imagery_tasks.models.types import is_url, location_scheme, path_or_url_from_string


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("s3://bucket/a.tif", "s3://bucket/a.tif"),
        ("s3://bucket", "s3://bucket"),
        ("HTTPS://Example.COM", "https://example.com/"),
        ("http://example.com/Some/Path?q=1#frag", "http://example.com/Some/Path?q=1#frag"),
        ("file:///tmp/imagery/a.tif", "file:///tmp/imagery/a.tif"),
        ("  s3://bucket/key/  ", "s3://bucket/key/"),
    ],
)
def test_urls_are_normalized(value: str, expected: str) -> None:
    """
    Test that absolute URLs are returned as normalized hrefs.

    Verifies:
    - Scheme and host are lower-cased
    - Web URLs without a path get "/"
    - Surrounding whitespace is removed
    """
    resolved = path_or_url_from_string(value)
    assert resolved == expected
    assert is_url(resolved)


@pytest.mark.parametrize(
    "value",
    [
        "s3://bucket/a.tif",
        "HTTPS://Example.COM",
        "http://host:8080",
        "mailto:someone@example.com",
        "s3://bucket/key ?",
        "http://example.com/a #",
        "s3:////Host:abc",
        "s3:////bucket/key",
        "file:////share/a.tif",
    ],
)
def test_url_resolution_is_idempotent(value: str) -> None:
    """
    Test that resolving an already resolved URL returns the same URL.

    Verifies:
    - A second resolution is a no-op
    - A string that is a URL still is one once resolved
    """
    once = path_or_url_from_string(value)
    assert path_or_url_from_string(once) == once
    if is_url(value):
        assert is_url(once)


def test_empty_authority_is_not_a_host() -> None:
    """
    Test that a path after an empty authority does not become the host.
    """
    assert path_or_url_from_string("s3:////bucket/key") == "s3:////bucket/key"
    assert path_or_url_from_string("s3:////Host:abc") == "s3:////Host:abc"
    assert path_or_url_from_string("s3://bucket/key ?") == "s3://bucket/key"


@pytest.mark.parametrize(
    "value",
    [
        "/data/file.tif",
        "relative/path.tif",
        "",
        "./imagery/",
        "C:\\imagery\\a.tif",
        "http://",
        "http://[::1",
        "http://example.com:port/",
        "http://exa mple.com/",
        "http://<host>/",
        " padded/path.tif ",
    ],
)
def test_non_urls_are_paths(value: str) -> None:
    """
    Test that anything that is not an absolute URL is returned unchanged.

    Verifies that malformed URLs, drive letters and relative paths never
    raise and come back byte-identical.
    """
    resolved = path_or_url_from_string(value)
    assert resolved == value
    assert not is_url(value)


def test_location_scheme() -> None:
    """
    Test the scheme of URLs and paths.
    """
    assert location_scheme("S3://bucket/key") == "s3"
    assert location_scheme("file:///tmp/a.tif") == "file"
    assert location_scheme("/tmp/a.tif") == ""
    assert location_scheme("relative.tif") == ""
