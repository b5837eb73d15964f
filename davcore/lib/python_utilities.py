from typing import Optional
from typing import Union


def to_wire(text: Union[str, bytes, None]) -> Optional[bytes]:
    """Body text as the bytes sent to the server"""
    if text is None:
        return None
    if isinstance(text, str):
        text = bytes(text, "utf-8")
    return text


def to_normal_str(text: Union[str, bytes, None]) -> Optional[str]:
    """
    Make sure we return a normal string, no matter if bytes or str
    was given.  Undecodable bytes are replaced, this is meant for
    logging and diagnostics.
    """
    if text is None:
        return text
    if not isinstance(text, str):
        text = text.decode("utf-8", errors="replace")
    text = text.replace("\r\n", "\n")
    return text
