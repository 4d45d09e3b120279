"""cURL command import/export for saved requests.

``to_curl_command`` turns a request into a command line that can be pasted
into a terminal, ``from_curl_command`` reads a pasted command back into a
request. Both sides share the double-quote escaping rules below.
"""
import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD")
BODY_METHODS = ("POST", "PUT", "DELETE", "OPTIONS")

SHELL_POSIX = "posix"
SHELL_WINDOWS = "windows"
SHELL_ALIASES = {
    SHELL_POSIX: SHELL_POSIX, SHELL_WINDOWS: SHELL_WINDOWS,
    "linux": SHELL_POSIX, "darwin": SHELL_POSIX, "win32": SHELL_WINDOWS,
}

_ESCAPES = {"\\": "\\\\", '"': '\\"', "$": "\\$", "`": "\\`", "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r", "$": "$", "`": "`"}
_SQ_EMBEDDED = "'\\''"

_FLAGS_METHOD = ("-X ", "--request ")
_FLAGS_HEADER = ("-H ", "--header ")
_FLAGS_DATA = ("-d ", "--data ", "--data-raw ")
_URL_STARTS = ("http://", "https://", '"', "'")


class CurlParseError(ValueError):
    message = "Invalid cURL command"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class MissingCommandPrefixError(CurlParseError):
    message = 'Invalid cURL command: must start with "curl"'


class UnclosedQuoteError(CurlParseError):
    message = "Unclosed quote in cURL command"


class MissingURLError(CurlParseError):
    message = "Invalid cURL command: URL is required"


@dataclass
class RequestDescriptor:
    method: str = "GET"
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def __post_init__(self):
        self.method = str(self.method or "GET").upper()
        if self.method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        self.headers = dict(self.headers or {})

    def to_dict(self) -> dict:
        return {"method": self.method, "url": self.url, "headers": dict(self.headers), "body": self.body}

    @classmethod
    def from_dict(cls, data: dict) -> "RequestDescriptor":
        if not isinstance(data, dict):
            raise ValueError("Request must be a JSON object")
        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            raise ValueError("Request headers must be a JSON object")
        body = data.get("body")
        return cls(method=data.get("method") or "GET", url=str(data.get("url") or ""),
                   headers={str(k): str(v) for k, v in headers.items()},
                   body=None if body is None else str(body))


def detect_shell_flavor(platform: Optional[str] = None) -> str:
    platform = (platform or sys.platform).lower()
    return SHELL_WINDOWS if platform.startswith("win") else SHELL_POSIX


def normalize_url(url: str) -> str:
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = "http://" + url
    return url


def escape_shell_arg(value: str, keep_newlines: bool = False) -> str:
    """Escape ``value`` for use between double quotes.

    Works on the original characters in one pass, so a backslash produced
    by one rule is never escaped again by another.
    """
    out = []
    for ch in value:
        if keep_newlines and ch == "\n":
            out.append(ch)
        else:
            out.append(_ESCAPES.get(ch, ch))
    return "".join(out)


def to_curl_command(request: RequestDescriptor, shell: str = SHELL_POSIX) -> str:
    flavor = SHELL_ALIASES.get(shell)
    if flavor is None:
        raise ValueError(f"Unknown shell flavor: {shell}")
    windows = flavor == SHELL_WINDOWS

    url = normalize_url(request.url)
    parts = ["curl", f'"{escape_shell_arg(url, keep_newlines=windows)}"' if " " in url else url]
    if request.method != "GET":
        parts.append(f"-X {request.method}")
    for name, value in request.headers.items():
        parts.append(f'-H "{name}: {escape_shell_arg(value, keep_newlines=windows)}"')
    if request.body and request.method in BODY_METHODS:
        parts.append(f'-d "{escape_shell_arg(request.body, keep_newlines=windows)}"')

    command = " ".join(parts)
    if windows:
        command = command.replace("\n", "^\n")
    return command


def extract_quoted_string(text: str, start: int) -> Tuple[str, int]:
    """Read one shell word at ``start``; returns ``(value, end)``.

    Single quotes are literal apart from the ``'\\''`` idiom, double quotes
    decode backslash escapes, bare words are returned as written.
    """
    if start >= len(text):
        return "", start
    quote = text[start]
    if quote not in ("'", '"'):
        word = re.match(r"\S*", text[start:]).group(0)
        return word, start + len(word)

    value = []
    i = start + 1
    if quote == "'":
        while i < len(text):
            if text[i] == "'":
                if text.startswith(_SQ_EMBEDDED, i):
                    value.append("'")
                    i += len(_SQ_EMBEDDED)
                    continue
                return "".join(value), i + 1
            value.append(text[i])
            i += 1
        raise UnclosedQuoteError()

    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            value.append(_UNESCAPES.get(nxt, ch + nxt))
            i += 2
            continue
        if ch == '"':
            return "".join(value), i + 1
        value.append(ch)
        i += 1
    raise UnclosedQuoteError()


def _normalize_command(text: str) -> str:
    text = text.strip()
    text = re.sub(r"\\[ \t]*\r?\n", " ", text)
    return re.sub(r"\s+", " ", text)


def _skip_spaces(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _match_flag(text: str, i: int, flags) -> int:
    for flag in flags:
        if text.startswith(flag, i):
            return _skip_spaces(text, i + len(flag))
    return -1


def from_curl_command(text: str) -> RequestDescriptor:
    """Parse a pasted cURL command.

    Only ``-X``, ``-H``, ``-d`` (and their long forms) and the URL are read.
    Anything else is skipped, so a mistyped flag is lost rather than
    reported.
    """
    command = _normalize_command(text)
    if command != "curl" and not command.startswith("curl "):
        raise MissingCommandPrefixError()
    command = command[4:].strip()

    result = RequestDescriptor()
    i = 0
    while i < len(command):
        arg_at = _match_flag(command, i, _FLAGS_METHOD)
        if arg_at >= 0:
            value, i = extract_quoted_string(command, arg_at)
            method = value.upper()
            if method in HTTP_METHODS:
                result.method = method
            else:
                logger.debug("ignoring unsupported method %r", value)
            continue

        arg_at = _match_flag(command, i, _FLAGS_HEADER)
        if arg_at >= 0:
            value, i = extract_quoted_string(command, arg_at)
            name, sep, header_value = value.partition(":")
            if sep and name.strip():
                result.headers[name.strip()] = header_value.strip()
            else:
                logger.debug("ignoring malformed header %r", value)
            continue

        arg_at = _match_flag(command, i, _FLAGS_DATA)
        if arg_at >= 0:
            result.body, i = extract_quoted_string(command, arg_at)
            continue

        if command.startswith(_URL_STARTS, i):
            value, i = extract_quoted_string(command, i)
            if result.url:
                logger.debug("ignoring extra URL-like token %r", value)
            else:
                result.url = value
            continue

        i += 1

    if not result.url:
        raise MissingURLError()
    return result
