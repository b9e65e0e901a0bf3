#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Responder side of the SIP ALG reverse connect.

Every accepted TCP connection is expected to carry a single REGISTER. The
responder answers with a 200 OK built from the request's own Via and Contact
lines, then opens a new connection to the address found in Contact and writes
a greeting line to it.
"""

import socket
import threading

from sip_headers import extract_callback, extract_contact, extract_via, parse_callback_address
from sip_log import log
from sip_templates import render_response

SIP_IP = ''
BUFFER_SIZE = 8192
TERMINATOR = b"\r\n\r\n"
DEFAULT_GREETING = "hello from the internet!"
DEFAULT_MAX_MESSAGE_SIZE = 65536


class SipMessageTooLarge(Exception):
    pass


def read_sip_message(conn, max_size=DEFAULT_MAX_MESSAGE_SIZE) -> bytes:
    """
    Read from `conn` until the blank line ending the SIP headers.

    Parameters:
        conn: connected socket (anything with recv)
        max_size (int): give up once this many bytes arrive without a
            terminator; 0 or None reads without limit

    Returns:
        bytes: the message up to and including CRLF CRLF
    """
    data = bytearray()
    while True:
        chunk = conn.recv(BUFFER_SIZE)
        if not chunk:
            raise ConnectionError(f"connection closed after {len(data)} bytes, before end of SIP message")
        # the terminator may straddle the previous chunk
        start = max(0, len(data) - len(TERMINATOR) + 1)
        data += chunk
        end = data.find(TERMINATOR, start)
        if end != -1:
            return bytes(data[:end + len(TERMINATOR)])
        if max_size and len(data) > max_size:
            raise SipMessageTooLarge(f"no end of SIP message within {max_size} bytes")


def greeting_payload(greeting) -> bytes:
    if not greeting.endswith("\n"):
        greeting += "\n"
    return greeting.encode("utf-8")


def call_back(contact, greeting=DEFAULT_GREETING, dial=socket.create_connection):
    """Dial the address in `contact` and write the greeting. Returns True on success."""
    callback = extract_callback(contact)
    if callback is None:
        log(f"[WARN] invalid host/port in contact: {contact}")
        return False
    try:
        address = parse_callback_address(callback)
    except ValueError as e:
        log(f"[WARN] {e}")
        return False

    log(f"[INFO] connecting back to: {address}")
    try:
        c2 = dial((address.host, address.port))
    except OSError as e:
        log(f"[ERROR] unable to connect to host behind NAT {address}: {e}")
        return False
    try:
        c2.sendall(greeting_payload(greeting))
    except OSError as e:
        log(f"[ERROR] unable to write to host behind NAT {address}: {e}")
        return False
    finally:
        c2.close()
    log(f"[SEND] greeting → {address}")
    return True


# ========== per connection ==========
def handle_connection(conn, addr, greeting=DEFAULT_GREETING,
                      max_size=DEFAULT_MAX_MESSAGE_SIZE, dial=socket.create_connection):
    try:
        try:
            data = read_sip_message(conn, max_size)
        except (OSError, SipMessageTooLarge) as e:
            log(f"[ERROR] unable to read from {addr}: {e}")
            return False

        log(f"[RECEIVE] {len(data)} bytes from {addr}")
        log(data.decode("latin-1").strip(), "debug")

        contact = extract_contact(data)
        if contact is None:
            log(f"[WARN] bad contact from {addr}: no Contact header")
            return False

        via = extract_via(data)
        if via is None:
            log(f"[WARN] bad via from {addr}: no Via header")
            return False

        # one sendall for the whole response: a fragmented 200 OK is not rewritten by the ALG
        response = render_response(via, contact)
        try:
            conn.sendall(response)
        except OSError as e:
            log(f"[ERROR] error sending response to {addr}: {e}")
            return False
        log(f"[SEND] 200 OK → {addr}")

        return call_back(contact, greeting, dial)
    finally:
        conn.close()


class SipResponder:
    """TCP listener that runs handle_connection in a thread per accepted connection."""

    def __init__(self, port, host=SIP_IP, greeting=DEFAULT_GREETING,
                 max_message_size=DEFAULT_MAX_MESSAGE_SIZE, dial=socket.create_connection):
        self.host = host
        self.port = int(port)
        self.greeting = greeting
        self.max_message_size = max_message_size
        self.dial = dial
        self.sock = None
        self.running = False

    def start(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            self.sock.bind((self.host, self.port))
            self.sock.listen(socket.SOMAXCONN)
        except OSError:
            self.sock.close()
            raise
        # port 0 binds an ephemeral port
        self.port = self.sock.getsockname()[1]
        self.running = True
        log(f"[INFO] SIP server started on {self.host or '0.0.0.0'}:{self.port}")

    def serve_forever(self):
        while self.running:
            try:
                conn, addr = self.sock.accept()
            except OSError as e:
                if not self.running:
                    break
                log(f"[ERROR] unable to accept connection: {e}")
                continue

            log(f"[INFO] accepted connection from: {addr}")
            threading.Thread(
                target=handle_connection,
                args=(conn, addr, self.greeting, self.max_message_size, self.dial),
                daemon=True,
            ).start()

    def stop(self):
        self.running = False
        if self.sock is None:
            return
        try:
            # wakes a thread blocked in accept()
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


def start_sip_server(port, host=SIP_IP, greeting=DEFAULT_GREETING,
                     max_message_size=DEFAULT_MAX_MESSAGE_SIZE):
    responder = SipResponder(port, host, greeting, max_message_size)
    responder.start()
    try:
        responder.serve_forever()
    finally:
        responder.stop()
