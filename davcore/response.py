"""
Parsing of 207 Multi-Status response bodies.

A multistatus body looks like this:

    <D:multistatus xmlns:D="DAV:">
        <D:response>
            <D:href>/dav/a/</D:href>
            <D:propstat>
                <D:prop>(...)</D:prop>
                <D:status>HTTP/1.1 200 OK</D:status>
            </D:propstat>
        </D:response>
        <D:response>
            <D:href>/dav/a/locked.txt</D:href>
            <D:status>HTTP/1.1 423 Locked</D:status>
        </D:response>
    </D:multistatus>

The body is parsed as a stream, one ``D:response`` element at a time,
so that large PROPFIND results with Depth: 1 don't have to be held in
memory as one big tree.
"""
import copy
import io
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import urlsplit

from lxml import etree
from lxml.etree import _Element

from davcore.lib import error
from davcore.lib.namespace import ns
from davcore.lib.python_utilities import to_normal_str
from davcore.lib.url import unescape

RESPONSE = ns("D", "response")
HREF = ns("D", "href")
STATUS = ns("D", "status")
PROPSTAT = ns("D", "propstat")
PROP = ns("D", "prop")
RESPONSEDESCRIPTION = ns("D", "responsedescription")


def status_to_code(status: Optional[str]) -> int:
    """
    "HTTP/1.1 404 Not Found" -> 404.  A missing status means 200.
    """
    if not status:
        return 200
    parts = status.split()
    if len(parts) >= 2 and parts[1].isdigit():
        return int(parts[1])
    error.weirdness("unparseable status line in multistatus response", status)
    return 500


@dataclass
class PropstatResponse:
    """
    One D:response element.  ``status`` is the status given for the
    resource as a whole (200 when only propstats were given),
    ``props`` maps property tags to the property elements and
    ``propstat_status`` maps the same tags to the status of the
    propstat they were delivered in.
    """

    href: str
    status: int = 200
    props: Dict[str, _Element] = field(default_factory=dict)
    propstat_status: Dict[str, int] = field(default_factory=dict)
    description: Optional[str] = None

    @classmethod
    def from_element(cls, response: _Element) -> "PropstatResponse":
        href: Optional[str] = None
        status: Optional[str] = None
        props: Dict[str, _Element] = {}
        propstat_status: Dict[str, int] = {}
        description = None
        for elem in response:
            if elem.tag == HREF:
                if href is not None:
                    error.weirdness("more than one href in a response", href)
                    continue
                href = (elem.text or "").strip()
            elif elem.tag == STATUS:
                status = elem.text
            elif elem.tag == PROPSTAT:
                code = status_to_code(elem.findtext(STATUS))
                for prop in elem.iterfind(PROP):
                    for theprop in prop:
                        props[theprop.tag] = copy.deepcopy(theprop)
                        propstat_status[theprop.tag] = code
            elif elem.tag == RESPONSEDESCRIPTION:
                description = elem.text
            elif elem.tag is not etree.Comment:
                error.weirdness("unexpected element found in response", elem.tag)
        if href is None:
            raise ValueError("response element without href")
        ## Some servers give absolute URLs, the caller expects paths
        href = unescape(href)
        if "://" in href:
            href = urlsplit(href).path
        return cls(
            href=href,
            status=status_to_code(status),
            props=props,
            propstat_status=propstat_status,
            description=description,
        )

    @property
    def ok(self) -> bool:
        if not 200 <= self.status < 300:
            return False
        return all(200 <= x < 300 for x in self.propstat_status.values())

    def prop_text(self, tag: str) -> Optional[str]:
        prop = self.props.get(tag)
        if prop is None:
            return None
        return prop.text


def parse_xml(
    stream: Any,
    target: Any = PropstatResponse,
    parse: Optional[Callable[[Any], None]] = None,
    huge_tree: bool = False,
) -> List[Any]:
    """
    Parse a multistatus document.

    Args:
        stream: the body, as bytes or a file-like object to read from
        target: builds one result per D:response through
          ``target.from_element(element)``
        parse: called with every result as soon as it is parsed
        huge_tree: see https://lxml.de/api/lxml.etree.XMLParser-class.html

    Returns:
        The list of results, in document order.

    Raises:
        lxml.etree.XMLSyntaxError on invalid (or empty) XML
    """
    if isinstance(stream, (bytes, str)):
        stream = io.BytesIO(stream.encode("utf-8") if isinstance(stream, str) else stream)
    results = []
    for _, elem in etree.iterparse(
        stream, events=("end",), tag=RESPONSE, huge_tree=huge_tree
    ):
        item = target.from_element(elem)
        if parse is not None:
            parse(item)
        results.append(item)
        ## keep the tree from growing while we stream through it
        elem.clear()
        while elem.getprevious() is not None:
            del elem.getparent()[0]
    return results


def stream_to_string(stream: Any) -> str:
    """Read all of a stream or response body into a string, for diagnostics"""
    if stream is None:
        return ""
    if hasattr(stream, "content") and not hasattr(stream, "read"):
        return to_normal_str(stream.content)
    return to_normal_str(stream.read())
