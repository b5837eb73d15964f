"""
Tests for the multistatus parser
"""
import io

import pytest
from lxml import etree

from davcore.response import PropstatResponse
from davcore.response import parse_xml
from davcore.response import status_to_code
from davcore.response import stream_to_string

PROPFIND_RESULT = b"""<?xml version="1.0" encoding="utf-8" ?>
<multistatus xmlns="DAV:">
  <response>
    <href>/dav/dir/</href>
    <propstat>
      <prop>
        <resourcetype><collection/></resourcetype>
        <displayname>dir</displayname>
      </prop>
      <status>HTTP/1.1 200 OK</status>
    </propstat>
    <propstat>
      <prop><getcontentlength/></prop>
      <status>HTTP/1.1 404 Not Found</status>
    </propstat>
  </response>
  <!-- servers do send comments -->
  <response>
    <href>https://dav.example.com/dav/dir/b%C3%A6r.txt</href>
    <propstat>
      <prop><getcontentlength>42</getcontentlength></prop>
      <status>HTTP/1.1 200 OK</status>
    </propstat>
    <responsedescription>all fine</responsedescription>
  </response>
</multistatus>
"""


class ResourceName:
    """A result target collecting only the href"""

    def __init__(self, href):
        self.href = href

    @classmethod
    def from_element(cls, elem):
        return cls(elem.findtext("{DAV:}href"))


def test_status_to_code():
    assert status_to_code("HTTP/1.1 404 Not Found") == 404
    assert status_to_code(" HTTP/1.1 207 Multi-Status ") == 207
    assert status_to_code(None) == 200
    assert status_to_code("garbage") == 500


def test_parse_stream():
    results = parse_xml(io.BytesIO(PROPFIND_RESULT))
    assert [x.href for x in results] == ["/dav/dir/", "/dav/dir/bær.txt"]
    directory, item = results
    assert directory.status == 200
    assert directory.prop_text("{DAV:}displayname") == "dir"
    assert directory.props["{DAV:}resourcetype"][0].tag == "{DAV:}collection"
    assert directory.propstat_status["{DAV:}getcontentlength"] == 404
    assert not directory.ok
    assert item.ok
    assert item.prop_text("{DAV:}getcontentlength") == "42"
    assert item.prop_text("{DAV:}displayname") is None
    assert item.description == "all fine"


def test_parse_callback_and_target():
    seen = []
    results = parse_xml(PROPFIND_RESULT, ResourceName, seen.append)
    assert [x.href for x in seen] == [
        "/dav/dir/",
        "https://dav.example.com/dav/dir/b%C3%A6r.txt",
    ]
    assert results == seen


def test_resource_status():
    results = parse_xml(
        b"""<d:multistatus xmlns:d="DAV:"><d:response>
              <d:href>/dav/x</d:href><d:status>HTTP/1.1 423 Locked</d:status>
            </d:response></d:multistatus>"""
    )
    assert results[0].status == 423
    assert not results[0].ok


def test_missing_href():
    with pytest.raises(ValueError):
        parse_xml(b'<d:multistatus xmlns:d="DAV:"><d:response/></d:multistatus>')


def test_invalid_xml():
    with pytest.raises(etree.XMLSyntaxError):
        parse_xml(b"this is not XML")
    with pytest.raises(etree.XMLSyntaxError):
        parse_xml(b"")


def test_empty_multistatus():
    assert parse_xml(b'<multistatus xmlns="DAV:"/>') == []


def test_stream_to_string():
    assert stream_to_string(io.BytesIO(b"a\r\nb")) == "a\nb"
    assert stream_to_string(None) == ""


def test_from_element():
    elem = etree.fromstring(
        b'<response xmlns="DAV:"><href>/a%20b</href></response>'
    )
    assert PropstatResponse.from_element(elem) == PropstatResponse(href="/a b")
