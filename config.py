#!/usr/bin/env python3
# -*- coding: utf-8 -*-

######
# .env file example
# SIP_LOCAL_PORT=4444
# SIP_REMOTE_PORT=5060
# SIP_LOCAL_IP=192.168.1.20
# SIP_HOST=203.0.113.10
# SIP_LOG_MODE=debug
######

import os

from dotenv import load_dotenv

from alg_server import DEFAULT_GREETING, DEFAULT_MAX_MESSAGE_SIZE
from sip_log import LOG_FILE_PATH as DEFAULT_LOG_FILE
from sip_log import MAX_LOG_DAYS as DEFAULT_MAX_LOG_DAYS


class ConfigError(Exception):
    pass


def _int_setting(env, name, default):
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def load_config(env=None):
    """
    Collect defaults for the command line from the environment.

    When `env` is None the process environment is used, after loading .env.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    log_mode = env.get("SIP_LOG_MODE", "brief")
    if log_mode not in ("brief", "debug"):
        raise ConfigError(f"SIP_LOG_MODE must be brief or debug, got {log_mode!r}")

    return {
        "local_port": env.get("SIP_LOCAL_PORT", ""),
        "remote_port": env.get("SIP_REMOTE_PORT", ""),
        "local_ip": env.get("SIP_LOCAL_IP", ""),
        "host": env.get("SIP_HOST", ""),
        "bind_ip": env.get("SIP_BIND_IP", ""),
        "greeting": env.get("SIP_GREETING", DEFAULT_GREETING),
        "max_message_size": _int_setting(env, "SIP_MAX_MESSAGE_SIZE", DEFAULT_MAX_MESSAGE_SIZE),
        "log_mode": log_mode,
        "log_file": env.get("SIP_LOG_FILE", DEFAULT_LOG_FILE),
        "max_log_days": _int_setting(env, "SIP_MAX_LOG_DAYS", DEFAULT_MAX_LOG_DAYS),
    }
