"""Integration tests for process startup and shutdown."""

from __future__ import annotations

import signal
import socket
from typing import TYPE_CHECKING

import pytest
import requests

from tests.utils.http import wait_for_log_event

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.conftest import ServerProcessInfo


def test_sigterm_stops_accepting_and_exits(server_process: "ServerProcessInfo") -> None:
    base_url = server_process["base_url"]
    assert requests.get(f"{base_url}/ping", timeout=5).status_code == 200

    process = server_process["process"]
    process.send_signal(signal.SIGTERM)
    assert process.wait(timeout=5) == 0

    with pytest.raises(OSError):
        socket.create_connection(
            (server_process["host"], server_process["port"]), timeout=1
        ).close()


def test_startup_is_logged(server_process: "ServerProcessInfo") -> None:
    requests.get(f"{server_process['base_url']}/ping", timeout=5)

    assert wait_for_log_event(server_process["log_file"], "server_listening")
    assert wait_for_log_event(server_process["log_file"], "request_complete")
