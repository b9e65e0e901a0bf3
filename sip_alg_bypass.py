#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Reverse TCP connect through a SIP ALG.

Server (outside the NAT):
    ./sip_alg_bypass.py -l -lp 5060

Client (behind the NAT):
    ./sip_alg_bypass.py -lp 4444 -rp 5060 -ip 192.168.1.20 -host 203.0.113.10
"""

import argparse
import sys

import sip_log
from alg_client import InitiatorError, run_initiator
from alg_server import start_sip_server
from config import ConfigError, load_config
from sip_log import log


def build_parser(defaults):
    parser = argparse.ArgumentParser(description="Reverse TCP connect through a SIP ALG")
    parser.add_argument("-l", dest="listen", action="store_true",
                        help="listen for incoming connections; this makes it a server")
    parser.add_argument("-lp", dest="local_port", default=defaults["local_port"],
                        help="the port to listen on locally (server and client)")
    parser.add_argument("-rp", dest="remote_port", default=defaults["remote_port"],
                        help="the port to connect to (client)")
    parser.add_argument("-ip", dest="local_ip", default=defaults["local_ip"],
                        help="the local NAT ip to connect back to (client)")
    parser.add_argument("-host", dest="host", default=defaults["host"],
                        help="the host to connect to (client)")
    parser.add_argument("--bind", dest="bind_ip", default=defaults["bind_ip"],
                        help="address to bind listening sockets to (default: all interfaces)")
    parser.add_argument("--greeting", default=defaults["greeting"],
                        help="line the server writes to the host behind the NAT")
    parser.add_argument("--max-size", dest="max_message_size", type=int,
                        default=defaults["max_message_size"],
                        help="largest SIP message the server reads, 0 for no limit")
    parser.add_argument("--debug", action="store_true", default=defaults["log_mode"] == "debug",
                        help="print debug log lines")
    parser.add_argument("--log-file", default=defaults["log_file"],
                        help="log file path, empty to disable")
    return parser


def _fail(parser, message):
    print(message, file=sys.stderr)
    parser.print_usage(sys.stderr)
    sys.exit(1)


def _check_port(parser, name, value):
    if not value.isdigit() or not 0 < int(value) < 65536:
        _fail(parser, f"invalid {name}: {value}")
    return int(value)


def validate(parser, args):
    if not args.local_port:
        _fail(parser, "you must specify a local port")
    args.local_port = _check_port(parser, "local port", args.local_port)
    if args.listen:
        return args

    if not args.remote_port:
        _fail(parser, "you must specify a remote port")
    if not args.local_ip:
        _fail(parser, "you must specify a local ip address")
    if not args.host:
        _fail(parser, "you must specify a host")
    args.remote_port = _check_port(parser, "remote port", args.remote_port)
    return args


def main(argv=None):
    try:
        defaults = load_config()
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    parser = build_parser(defaults)
    args = validate(parser, parser.parse_args(argv))

    sip_log.set_log_mode("debug" if args.debug else "brief")
    sip_log.set_log_file(args.log_file)
    sip_log.set_max_log_days(defaults["max_log_days"])
    sip_log.start_log_cleanup_thread()

    if args.listen:
        try:
            start_sip_server(args.local_port, args.bind_ip, args.greeting, args.max_message_size)
        except OSError as e:
            log(f"[ERROR] unable to start SIP server: {e}")
            return 1
        except KeyboardInterrupt:
            log("[INFO] SIP server stopped")
        return 0

    try:
        run_initiator(args.host, args.local_ip, args.local_port, args.remote_port, args.bind_ip)
    except InitiatorError as e:
        log(f"[ERROR] {e}")
        return 1
    except KeyboardInterrupt:
        log("[INFO] interrupted")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
