"""
Target URL validation.

Follows the WHATWG URL parsing rules browsers apply to http(s) URLs:
surrounding whitespace and embedded tabs/newlines are dropped, slashes
after the scheme are optional, paths may contain characters that get
percent-encoded, but the host must be a valid domain, IPv4 or IPv6 host.
"""

import ipaddress
import re
from urllib.parse import unquote_to_bytes

ALLOWED_SCHEMES = ("http", "https")

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
_C0_AND_SPACE = "".join(chr(c) for c in range(0x21))
_TAB_OR_NEWLINE_RE = re.compile(r"[\t\n\r]")
_AUTHORITY_END_RE = re.compile(r"[/\\?#]")

# Forbidden domain code points
_FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|\x7f") | frozenset(chr(c) for c in range(0x20))

_DIGITS = {8: "01234567", 10: "0123456789", 16: "0123456789abcdef"}


def is_valid_target(candidate: str) -> bool:
    """
    Check that a string parses as an absolute http(s) URL.

    Any parse failure, invalid host or other scheme yields False.

    Example:
        >>> is_valid_target("https://example.com")
        True
        >>> is_valid_target("javascript:alert(1)")
        False
    """
    if not isinstance(candidate, str):
        return False

    cleaned = _TAB_OR_NEWLINE_RE.sub("", candidate.strip(_C0_AND_SPACE))
    match = _SCHEME_RE.match(cleaned)
    if not match or match.group(1).lower() not in ALLOWED_SCHEMES:
        return False

    rest = cleaned[match.end():].lstrip("/\\")
    authority = _AUTHORITY_END_RE.split(rest, maxsplit=1)[0]
    host_port = authority.rpartition("@")[2]
    return _is_valid_host_port(host_port)


def _is_valid_host_port(host_port: str) -> bool:
    if host_port.startswith("["):
        end = host_port.find("]")
        if end == -1:
            return False
        host, remainder = host_port[1:end], host_port[end + 1:]
        if remainder and not remainder.startswith(":"):
            return False
        if "%" in host:
            return False
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return _is_valid_port(remainder[1:])

    host, _, port = host_port.partition(":")
    return _is_valid_port(port) and _is_valid_domain(host)


def _is_valid_port(port: str) -> bool:
    if not port:
        return True
    return port.isascii() and port.isdigit() and int(port) <= 65535


def _is_valid_domain(host: str) -> bool:
    if not host:
        return False

    try:
        decoded = unquote_to_bytes(host).decode("utf-8")
    except UnicodeDecodeError:
        return False

    if any(ch in _FORBIDDEN_HOST_CHARS for ch in decoded):
        return False

    if not decoded.isascii():
        try:
            decoded = decoded.encode("idna").decode("ascii")
        except UnicodeError:
            return False

    host = decoded.lower()
    if _ends_in_number(host):
        return _is_valid_ipv4(host)
    return True


def _ipv4_labels(host: str) -> list:
    labels = host.split(".")
    if len(labels) > 1 and labels[-1] == "":
        labels.pop()
    return labels


def _ends_in_number(host: str) -> bool:
    last = _ipv4_labels(host)[-1]
    if last.isdigit():
        return True
    return last.startswith("0x") and all(ch in "0123456789abcdef" for ch in last[2:])


def _parse_ipv4_number(label: str):
    if not label:
        return None
    base = 10
    if label.startswith("0x"):
        label, base = label[2:], 16
        if not label:
            return 0
    elif len(label) > 1 and label.startswith("0"):
        label, base = label[1:], 8
    if any(ch not in _DIGITS[base] for ch in label):
        return None
    return int(label, base)


def _is_valid_ipv4(host: str) -> bool:
    """Hosts ending in a number must be a valid (possibly shorthand) IPv4 address."""
    labels = _ipv4_labels(host)
    if len(labels) > 4:
        return False

    numbers = [_parse_ipv4_number(label) for label in labels]
    if any(n is None for n in numbers):
        return False
    if any(n > 255 for n in numbers[:-1]):
        return False
    return numbers[-1] < 256 ** (5 - len(numbers))
