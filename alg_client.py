#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import socket
import threading

from sip_log import log
from sip_templates import render_request


class InitiatorError(Exception):
    pass


# ========== listener activity ==========
class CallbackListener:
    """
    One-shot listener for the responder's connect back.

    Accepts a single connection and reads one line from it. `armed` is set
    once the socket is listening (or binding failed, see `error`).
    """

    def __init__(self, port, host=""):
        self.host = host
        self.port = int(port)
        self.armed = threading.Event()
        self.error = None
        self.line = None

    def run(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
            sock.listen(1)
        except OSError as e:
            sock.close()
            self.error = InitiatorError(f"unable to open socket for listening on port {self.port}: {e}")
            self.armed.set()
            return

        with sock:
            self.port = sock.getsockname()[1]
            log(f"[INFO] listening on port: {self.port}")
            self.armed.set()
            try:
                conn, addr = sock.accept()
            except OSError as e:
                self.error = InitiatorError(f"unable to accept incoming connect: {e}")
                return

        with conn:
            log(f"[INFO] accepted connection from: {addr}")
            try:
                with conn.makefile("rb") as reader:
                    line = reader.readline()
            except OSError as e:
                log(f"[ERROR] unable to read from connection: {e}")
                return

        self.line = line.decode("utf-8", errors="replace").rstrip("\r\n")
        log(f"[RECEIVE] received message from remote server: `{self.line}`")


# ========== request activity ==========
def send_request(host, local_ip, local_port, remote_port, dial=socket.create_connection):
    """Dial the responder and write the REGISTER. Returns the open connection."""
    target = f"{host}:{remote_port}"
    try:
        conn = dial((host, int(remote_port)))
    except (OSError, ValueError) as e:
        raise InitiatorError(f"unable to connect to {target}: {e}") from e

    # rendered up front so it leaves in a single write, see alg_server.handle_connection
    request = render_request(local_ip, local_port, remote_port)
    try:
        conn.sendall(request)
    except OSError as e:
        conn.close()
        raise InitiatorError(f"unable to send REGISTER to {target}: {e}") from e

    log(f"[SEND] REGISTER → {target}")
    log(request.decode("utf-8").strip(), "debug")
    return conn


def run_initiator(host, local_ip, local_port, remote_port, bind_ip="", dial=socket.create_connection):
    """
    Arm the callback listener, send the REGISTER and wait for the connect back.

    Returns the line read from the responder (None when reading it failed).
    Raises InitiatorError when listening or dialing fails. A failed REGISTER
    does not stop the listener thread; it is a daemon and dies with the process.
    """
    listener = CallbackListener(local_port, bind_ip)
    thread = threading.Thread(target=listener.run, daemon=True)
    thread.start()

    listener.armed.wait()
    if listener.error is not None:
        raise listener.error

    conn = send_request(host, local_ip, local_port, remote_port, dial)
    try:
        thread.join()
    finally:
        conn.close()

    if listener.error is not None:
        raise listener.error
    return listener.line
