import pytest

from hotserve.content_types import content_type_for


@pytest.mark.parametrize("path, expected", [
    ("app.js", "text/javascript"),
    ("style.css", "text/css"),
    ("data.json", "application/json"),
    ("logo.png", "image/png"),
    ("photo.jpg", "image/jpg"),
    ("nested/dir/Photo.JPG", "image/jpg"),
    ("icon.svg", "image/svg+xml"),
])
def test_known_extensions(path, expected):
    assert content_type_for(path) == expected


@pytest.mark.parametrize("path", ["README", "archive.tar.xyz", "", "dir.d/file"])
def test_unknown_extension_falls_back_to_html(path):
    assert content_type_for(path) == "text/html"
