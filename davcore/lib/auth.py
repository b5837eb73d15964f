"""
Authenticators for the DAVClient.

An authenticator attaches credentials to an outgoing request.  The
client starts out with a NoAuth authenticator carrying the configured
username and password; when the server challenges an anonymous request
with a 401, authenticator_from_challenge picks the replacement (Digest
or Basic) based on the WWW-Authenticate header.  Authenticators are
never modified after construction, the client swaps the whole object.

The header computation itself is done by requests.auth.
"""
import re
from typing import Dict
from typing import Optional
from typing import Set
from typing import Union

from requests.auth import HTTPBasicAuth
from requests.auth import HTTPDigestAuth
from requests.models import PreparedRequest
from requests.utils import parse_dict_header

from davcore.lib import error

NO_AUTH = "NoAuth"
BASIC = "Basic"
DIGEST = "Digest"
BEARER = "Bearer"

## challenge parameters we care about when computing a digest response
DIGEST_KEYS = ("realm", "nonce", "qop", "opaque", "algorithm", "domain", "stale")


class Authenticator:
    """
    Base class.  Subclasses set ``type`` and implement ``authorize``.
    """

    type: str = ""

    def __init__(self, user: Optional[str] = None, password: Optional[str] = None):
        self._user = user
        self._password = password

    @property
    def user(self) -> Optional[str]:
        return self._user

    @property
    def password(self) -> Optional[str]:
        return self._password

    def authorize(self, request: PreparedRequest, method: str, path: str) -> None:
        raise NotImplementedError()

    def __repr__(self) -> str:
        return "%s(user=%r)" % (self.__class__.__name__, self._user)


class NoAuth(Authenticator):
    """Anonymous access.  Keeps the credentials around for an upgrade."""

    type = NO_AUTH

    def authorize(self, request: PreparedRequest, method: str, path: str) -> None:
        pass


class BasicAuth(Authenticator):
    type = BASIC

    def __init__(self, user: Optional[str], password: Optional[str]) -> None:
        super().__init__(user, password)
        ## requests encodes str credentials as latin1, which breaks on
        ## non-ascii passwords.  utf-8 is what servers expect these days.
        self._basic = HTTPBasicAuth(_utf8(user), _utf8(password))

    def authorize(self, request: PreparedRequest, method: str, path: str) -> None:
        self._basic(request)


class _ChallengedDigestAuth(HTTPDigestAuth):
    """HTTPDigestAuth starting out with a known challenge in every thread"""

    def __init__(
        self, username: str, password: str, challenge: Dict[str, str]
    ) -> None:
        super().__init__(username, password)
        self.initial_challenge = challenge

    def init_per_thread_state(self) -> None:
        if not hasattr(self._thread_local, "init"):
            super().init_per_thread_state()
            self._thread_local.chal = dict(self.initial_challenge)


class DigestAuth(Authenticator):
    type = DIGEST

    def __init__(
        self, user: Optional[str], password: Optional[str], challenge: Dict[str, str]
    ) -> None:
        super().__init__(user, password)
        self._challenge = dict(challenge)
        self._digest = _ChallengedDigestAuth(
            user or "", password or "", self._challenge
        )

    @property
    def challenge(self) -> Dict[str, str]:
        return dict(self._challenge)

    def authorize(self, request: PreparedRequest, method: str, path: str) -> None:
        if "realm" not in self._challenge or "nonce" not in self._challenge:
            error.weirdness("digest challenge without realm or nonce", self._challenge)
            return
        ## the nonce count is kept per thread
        self._digest.init_per_thread_state()
        header = self._digest.build_digest_header(method, request.url)
        if header is None:
            error.weirdness(
                "unsupported digest challenge, sending request without credentials",
                self._challenge,
            )
            return
        request.headers["Authorization"] = header


class BearerAuth(Authenticator):
    """Token authentication.  Only used when configured explicitly."""

    type = BEARER

    def __init__(self, token: str) -> None:
        super().__init__(None, token)

    def authorize(self, request: PreparedRequest, method: str, path: str) -> None:
        request.headers["Authorization"] = f"Bearer {self._password}"


def _utf8(text: Union[str, bytes, None]) -> bytes:
    if text is None:
        return b""
    if isinstance(text, str):
        return text.encode("utf-8")
    return text


def extract_auth_types(header: str) -> Set[str]:
    """
    The lowercase authentication schemes offered in a WWW-Authenticate
    header.

    Example:
        >>> sorted(extract_auth_types('Basic realm="x", Digest realm="x", nonce="y"'))
        ['basic', 'digest']
    """
    ## Parameters like nonce="y" show up as their own comma separated
    ## item, only items without "=" in the first word are schemes
    types = set()
    for item in header.split(","):
        words = item.split()
        if words and "=" not in words[0]:
            types.add(words[0].lower())
    return types


def digest_parts(header: str) -> Dict[str, str]:
    """
    The parameters of the Digest challenge in a WWW-Authenticate
    header, i.e. realm, nonce, qop, opaque and algorithm.  Other
    schemes offered in the same header are disregarded.
    """
    match = re.search(r"digest\s+", header, flags=re.IGNORECASE)
    if not match:
        return {}
    params = parse_dict_header(header[match.end() :])
    return {
        key.lower(): value
        for key, value in params.items()
        if key.lower() in DIGEST_KEYS and value is not None
    }


def authenticator_from_challenge(
    header: Optional[str], current: Authenticator
) -> Optional[Authenticator]:
    """
    Decide what to replace an anonymous authenticator with after a
    401.  Digest is preferred over Basic when both are offered.
    Returns None if the challenge names neither scheme.
    """
    schemes = extract_auth_types(header or "")
    if "digest" in schemes:
        return DigestAuth(current.user, current.password, digest_parts(header))
    if "basic" in schemes:
        return BasicAuth(current.user, current.password)
    return None


def build_auth(
    auth_type: Optional[str],
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> Authenticator:
    """
    The initial authenticator for a client.  Without an auth_type the
    client starts anonymous and upgrades on the first challenge, giving
    an auth_type saves that round trip.
    """
    if not auth_type:
        return NoAuth(username, password)
    auth_type = auth_type.lower()
    if auth_type == "basic":
        return BasicAuth(username, password)
    if auth_type == "bearer":
        if not password:
            raise ValueError(
                "bearer auth requested, but no password given.  The bearer token should be configured as password"
            )
        return BearerAuth(password)
    if auth_type == "digest":
        raise ValueError(
            "digest auth needs a challenge from the server, leave auth_type unset"
        )
    raise ValueError(f"unknown auth_type {auth_type}")
