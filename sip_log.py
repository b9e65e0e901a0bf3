#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os
import re
import threading
import time
from datetime import datetime, timedelta

LOG_FILE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs", "sip_alg.log")
log_mode = "brief"
MAX_LOG_DAYS = 7

_file_lock = threading.Lock()


def set_log_mode(mode):
    global log_mode
    if mode not in ("brief", "debug"):
        raise ValueError(f"unknown log mode: {mode}")
    log_mode = mode


def set_log_file(path):
    """Set the log file path. An empty path disables file logging."""
    global LOG_FILE_PATH
    LOG_FILE_PATH = path


def set_max_log_days(days):
    global MAX_LOG_DAYS
    MAX_LOG_DAYS = days


# ========== Log ==========
def log(msg, level="brief"):
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    formatted_msg = f"[{timestamp}] {msg}"
    if log_mode == "debug" or level == "brief":
        print(formatted_msg, flush=True)
    if not LOG_FILE_PATH:
        return
    try:
        with _file_lock:
            os.makedirs(os.path.dirname(os.path.abspath(LOG_FILE_PATH)), exist_ok=True)
            with open(LOG_FILE_PATH, "a", encoding="utf-8") as f:
                f.write(formatted_msg + "\n")
    except OSError as e:
        print(f"[ERROR] failure on writing Log file: {e}")


def start_log_cleanup_thread():
    def cleanup_loop():
        while True:
            cleanup_old_logs()
            time.sleep(3600)  # once an hour
    threading.Thread(target=cleanup_loop, daemon=True).start()


def cleanup_old_logs():
    if not LOG_FILE_PATH or not os.path.exists(LOG_FILE_PATH):
        return
    try:
        cutoff = datetime.now() - timedelta(days=MAX_LOG_DAYS)
        lines = []
        with _file_lock:
            with open(LOG_FILE_PATH, "r", encoding="utf-8") as f:
                for line in f:
                    match = re.match(r'\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]', line)
                    if match:
                        log_time = datetime.strptime(match.group(1), "%Y-%m-%d %H:%M:%S")
                        if log_time >= cutoff:
                            lines.append(line)
                    # Skip lines that do not start with a timestamp (delete)
            with open(LOG_FILE_PATH, "w", encoding="utf-8") as f:
                f.writelines(lines)
    except OSError as e:
        print(f"[ERROR] fail in cleanup_old_logs(): {e}")
