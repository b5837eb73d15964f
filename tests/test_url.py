import pytest

from davcore.lib import url


@pytest.mark.parametrize(
    "root,path,expected",
    [
        ("/dav/", "a/b", "/dav/a/b"),
        ("/dav", "/a/b/", "/dav/a/b/"),
        ("/dav/", "", "/dav/"),
        ("/", "file.txt", "/file.txt"),
    ],
)
def test_join(root, path, expected):
    assert url.join(root, path) == expected


def test_path_escape():
    assert url.path_escape("/dav/a b/c%d") == "/dav/a%20b/c%25d"
    assert url.path_escape("/dav/bæ/x?y#z") == "/dav/b%C3%A6/x%3Fy%23z"
    assert url.path_escape("/dav/me@example.com:1/") == "/dav/me@example.com:1/"


@pytest.mark.parametrize(
    "path,expected",
    [
        ("a/b/file.txt", "a/b"),
        ("a/b/", "a"),
        ("file.txt", "."),
        ("/file.txt", "/"),
        ("/a/file.txt", "/a"),
        ("/", "/"),
        ("", "."),
    ],
)
def test_parent(path, expected):
    assert url.parent(path) == expected


def test_segments():
    assert url.segments("/a//b/./c/") == ["a", "b", "c"]
    assert url.segments("") == []
