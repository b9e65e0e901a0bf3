import socket

import pytest

import sip_log


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    """Send log lines to a temporary file and reset the mode for every test."""
    path = tmp_path / "sip_alg.log"
    monkeypatch.setattr(sip_log, "LOG_FILE_PATH", str(path))
    monkeypatch.setattr(sip_log, "log_mode", "brief")
    return path


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
