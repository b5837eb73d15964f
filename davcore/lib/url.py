#!/usr/bin/env python
"""
Helpers for the paths handed to the DAVClient.

Paths given to the client operations are relative to the client root,
i.e. with a client set up towards "https://dav.example.com/dav/", the
path "a/b/file.txt" refers to "https://dav.example.com/dav/a/b/file.txt".
Paths are plain (unescaped) text until path_escape is applied right
before the request is sent.
"""
import posixpath
from typing import List
from urllib.parse import quote
from urllib.parse import unquote

## characters allowed unescaped within one path segment, as per rfc3986
SEGMENT_SAFE = "!$&'()*+,;=:@~"


def join(root: str, path: str) -> str:
    """Join root and path with exactly one slash in between"""
    return root.rstrip("/") + "/" + path.lstrip("/")


def path_escape(path: str) -> str:
    """
    Percent-escape every segment of the path, keeping the slashes.
    Already escaped input will be escaped once more.
    """
    return "/".join(quote(segment, safe=SEGMENT_SAFE) for segment in path.split("/"))


def parent(path: str) -> str:
    """
    The parent directory of path.  "." is returned when there is no
    parent (a bare name), "/" for items directly below the root.
    Trailing slashes (collections) are disregarded.
    """
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path.startswith("/") else "."
    return posixpath.dirname(stripped) or "."


def segments(path: str) -> List[str]:
    """The non-empty segments of path"""
    return [x for x in path.split("/") if x and x != "."]


def unescape(path: str) -> str:
    return unquote(path)
