#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fixed SIP message skeletons for the ALG trick.

Only the addressing fields are substituted. Values are inserted verbatim,
so callers must not pass anything containing CR or LF.
"""
from string import Formatter


class TemplateError(Exception):
    pass


# Via carries the *remote* port and Contact the local listening port.
# The ALG rewrites around the Contact address, which is where the responder dials back.
SIP_REQUEST = (
    "REGISTER sip:example.org;transport=TCP SIP/2.0\r\n"
    "Via: SIP/2.0/TCP {local_ip}:{remote_port};branch=I9hG4bK-d8754z-c2ac7de1b3ce90f7-1---d8754z-;rport;transport=TCP\r\n"
    "Max-Forwards: 70\r\n"
    "Contact: <sip:wuzzi@{local_ip}:{local_port};rinstance=v40f3f83b335139c;transport=TCP>\r\n"
    "To: <sip:wuzzi@example.org;transport=TCP>\r\n"
    "From: <sip:wuzzi@example.org;transport=TCP>;tag=U7c3d519\r\n"
    "Call-ID: aaaaaaaaaaaaaaaaa0404aaaaaaaaaaaabbbbbbZjQ4M2M.\r\n"
    "CSeq: 1 REGISTER\r\n"
    "Expires: 60\r\n"
    "Allow: REGISTER, INVITE, ACK, CANCEL, BYE, NOTIFY, REFER, MESSAGE, OPTIONS, INFO, SUBSCRIBE\r\n"
    "Supported: replaces, norefersub, extended-refer, timer, X-cisco-serviceuri\r\n"
    "Allow-Events: presence, kpml\r\n"
    "Content-Length: 0\r\n"
    "\r\n"
)

SIP_RESPONSE = (
    "SIP/2.0 200 OK\r\n"
    "{via};received=0.0.0.0\r\n"
    "From: <sip:wuzzi@example.org;transport=TCP>;tag=U7c3d519\r\n"
    "To: <sip:wuzzi@example.org;transport=TCP>;tag=37GkEhwl6\r\n"
    "Call-ID: aaaaaaaaaaaaaaaaa0404aaaaaaaaaaaabbbbbbZjQ4M2M.\r\n"
    "CSeq: 1 REGISTER\r\n"
    "{contact};expires=3600\r\n"
    "Content-Length: 0\r\n"
    "\r\n"
)


def check_template(name, template, fields):
    """Raise TemplateError unless `template` uses exactly `fields` as placeholders."""
    try:
        found = {f for _, f, _, _ in Formatter().parse(template) if f is not None}
    except ValueError as e:
        raise TemplateError(f"{name}: {e}") from e
    if found != set(fields):
        raise TemplateError(f"{name}: placeholders {sorted(found)} != {sorted(fields)}")
    if not template.endswith("\r\n\r\n"):
        raise TemplateError(f"{name}: missing blank line terminator")
    return template


# checked once at import, read-only afterwards
_REQUEST = check_template("sip_request", SIP_REQUEST, ("local_ip", "local_port", "remote_port"))
_RESPONSE = check_template("sip_response", SIP_RESPONSE, ("via", "contact"))


def render_request(local_ip, local_port, remote_port) -> bytes:
    msg = _REQUEST.format(local_ip=local_ip, local_port=local_port, remote_port=remote_port)
    return msg.encode("utf-8")


def render_response(via, contact) -> bytes:
    msg = _RESPONSE.format(via=via, contact=contact)
    # headers were decoded as latin-1, so this echoes the received bytes
    return msg.encode("latin-1")
