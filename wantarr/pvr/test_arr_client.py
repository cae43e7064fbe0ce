import pytest

from wantarr.pvr.arr_client import resolve_api_url


@pytest.mark.parametrize(
    ("root", "expected"),
    [
        ("http://localhost:8989", "http://localhost:8989/api/v3"),
        ("http://localhost:8989/", "http://localhost:8989/api/v3"),
        ("http://host/sonarr", "http://host/sonarr/api/v3"),
        ("http://host/sonarr/api/v3/", "http://host/sonarr/api/v3"),
        ("http://api.example.com", "http://api.example.com/api/v3"),
        ("http://api.example.com/sonarr", "http://api.example.com/sonarr/api/v3"),
    ],
)
def test_resolve_api_url(root: str, expected: str) -> None:
    assert str(resolve_api_url(root)) == expected
