#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Watch the SIP TCP port and log every data-carrying segment.

Shows whether the REGISTER / 200 OK went out as one segment, which the ALG
needs in order to rewrite it. Run as root.
"""
import argparse

from scapy.all import IP, TCP, Raw, sniff

from sip_log import log

TERMINATOR = b"\r\n\r\n"


def describe_segment(pkt, port):
    """Called once per packet. Returns a log line, or None for other traffic."""
    if IP not in pkt or TCP not in pkt:
        return None
    tcp = pkt[TCP]
    if port not in (tcp.sport, tcp.dport):
        return None
    if Raw not in pkt:
        return None

    payload = bytes(pkt[Raw].load)
    first = payload.split(b"\r\n", 1)[0].decode("latin-1")
    complete = "yes" if payload.endswith(TERMINATOR) else "no"
    return (f"TCP {pkt[IP].src}:{tcp.sport} -> {pkt[IP].dst}:{tcp.dport} "
            f"len={len(payload)} first={first!r} complete={complete}")


def handle_packet(pkt, port):
    line = describe_segment(pkt, port)
    if line:
        log(f"[SEGMENT] {line}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Log TCP segments on the SIP port")
    parser.add_argument("--port", type=int, default=5060)
    parser.add_argument("--iface", default=None, help="interface to sniff (default: scapy's choice)")
    args = parser.parse_args(argv)

    bpf = f"tcp port {args.port}"
    log(f"[INFO] watching {bpf} on {args.iface or 'default interface'}")
    sniff(iface=args.iface, filter=bpf, prn=lambda pkt: handle_packet(pkt, args.port), store=False)


if __name__ == "__main__":
    main()
