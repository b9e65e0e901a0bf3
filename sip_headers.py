#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import re
from typing import NamedTuple, Optional

# first match wins, no SIP grammar checks
VIA_PATTERN = re.compile(rb'Via:[^\r]+')
CONTACT_PATTERN = re.compile(rb'Contact:[^\r]+')
CALLBACK_PATTERN = re.compile(r'@(?P<callback>[^;]+)')


class CallbackAddress(NamedTuple):
    host: str
    port: int

    def __str__(self):
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def _find_header(pattern, raw: bytes) -> Optional[str]:
    if isinstance(raw, str):
        raw = raw.encode("latin-1")
    match = pattern.search(raw)
    if not match:
        return None
    return match.group(0).decode("latin-1")


# ========== parse header ==========
def extract_via(raw: bytes) -> Optional[str]:
    """Return the verbatim `Via:` line (without CRLF) or None."""
    return _find_header(VIA_PATTERN, raw)


def extract_contact(raw: bytes) -> Optional[str]:
    """Return the verbatim `Contact:` line (without CRLF) or None."""
    return _find_header(CONTACT_PATTERN, raw)


def extract_callback(contact: str) -> Optional[str]:
    """
    Extract the callback "host:port" from a Contact header.

    The callback is everything after the first '@' up to the next ';'.

    Parameters:
        contact (str): Contact header line

    Returns:
        str | None: callback text (ex: "10.0.0.5:4444") or None
    """
    if isinstance(contact, bytes):
        contact = contact.decode("latin-1")
    match = CALLBACK_PATTERN.search(contact)
    return match.group("callback") if match else None


def parse_callback_address(text: str) -> CallbackAddress:
    """Split "host:port" (or "[v6]:port"). Raises ValueError when it does not parse."""
    host, sep, port = text.rpartition(":")
    if not sep or not host:
        raise ValueError(f"no port in callback address {text!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"invalid port in callback address {text!r}")
    return CallbackAddress(host, int(port))
