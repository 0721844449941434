from __future__ import annotations

import socket

from connchk.errors import TcpConnectError
from connchk.models import split_host_port


def run_tcp(address: str, timeout_s: float) -> None:
    host, port = split_host_port(address)
    try:
        with socket.create_connection((host, port), timeout=timeout_s):
            pass
    except OSError as e:
        raise TcpConnectError(f"{e.__class__.__name__}: {e}") from e
