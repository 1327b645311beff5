"""Line encoding/decoding for handshake-testkit.

Protocol lines are text, one command per line, terminated by CRLF:
  KEYWORD[ payload]\\r\\n

The INFO and CONNECT payloads are compact JSON objects.
"""

import json

from common.connection import UnexpectedMessageError
from common.protocol import CRLF, INFO


class EncodingError(Exception):
    """Raised when a line or payload cannot be decoded."""

    pass


class TransportError(Exception):
    """Raised when the stream ends or times out before a full line arrives."""

    pass


def encode_line(keyword: str, payload: str | None = None) -> str:
    """Encode a protocol line with CRLF terminator."""
    if payload:
        return f"{keyword} {payload}{CRLF}"
    return f"{keyword}{CRLF}"


def decode_line(raw: bytes | str) -> tuple[str, str]:
    """Split a received line into (keyword, rest).

    Trailing CR/LF is stripped. Raises EncodingError on undecodable
    bytes or an empty line.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Line is not valid UTF-8: {e}")

    line = raw.rstrip("\r\n")
    if not line:
        raise EncodingError("Empty line")

    keyword, _, rest = line.partition(" ")
    return keyword, rest


def expect_keyword(line: str, keyword: str) -> str:
    """Check that line starts with keyword. Returns the stripped line.

    Prefix match only: "PINGX" satisfies PING, as a lenient server would.
    """
    stripped = line.rstrip("\r\n")
    if not stripped.startswith(keyword):
        shown = stripped if len(stripped) <= 64 else stripped[:64] + "..."
        raise UnexpectedMessageError(f"Expected {keyword}, got {shown!r}")
    return stripped


def encode_json(obj: dict) -> str:
    """Compact JSON, no spaces, the way the greeting is written on the wire."""
    return json.dumps(obj, separators=(",", ":"))


def encode_info(info: dict) -> str:
    """Encode the INFO greeting line."""
    return encode_line(INFO, encode_json(info))


def decode_info(rest: str) -> dict:
    """Decode the INFO payload into a dict.

    Raises EncodingError if the payload is not a JSON object.
    """
    try:
        info = json.loads(rest)
    except json.JSONDecodeError as e:
        raise EncodingError(f"Invalid INFO payload: {e}")

    if not isinstance(info, dict):
        raise EncodingError(f"INFO payload is not an object: {type(info).__name__}")
    return info
