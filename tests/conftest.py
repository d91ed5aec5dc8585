"""Shared fixtures for the siteprobe test-suite."""

from __future__ import annotations

import socket
import threading

import pytest

from siteprobe.config import Settings


PROBE_ENV_VARS = (
    "HEALTHZ_DB_URL",
    "WORDPRESS_DB_HOST",
    "WORDPRESS_DB_USER",
    "SERVICE_USER_WORDPRESS",
    "WORDPRESS_DB_PASSWORD",
    "SERVICE_PASSWORD_WORDPRESS",
    "WORDPRESS_DB_PASSWORD_FILE",
    "WORDPRESS_DB_NAME",
    "HEALTHZ_DB_TIMEOUT",
    "HEALTHZ_DB_MAX_EXECUTION_MS",
    "HEALTHZ_CHECK_REDIS",
    "WP_REDIS_HOST",
    "WP_REDIS_PORT",
    "WP_REDIS_PASSWORD",
    "HEALTHZ_CACHE_TIMEOUT",
    "HEALTHZ_TOKEN",
    "HEALTHZ_MAINTENANCE_FILE",
    "HEALTHZ_MAINTENANCE",
    "HEALTHZ_DEADLINE",
    "PRIMARY_DOMAIN",
    "FORCE_HTTPS",
    "LOG_LEVEL",
    "WORDPRESS_CONFIG_EXTRA",
    "WP_SMTP_FORCE",
    "PROBECTL_URL",
    "PROBECTL_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test in an empty directory with no probe-related env vars.

    The working directory matters because both the ``.env`` file and the
    default ``.maintenance`` marker are resolved relative to it.
    """
    for name in PROBE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def sqlite_settings() -> Settings:
    """Settings whose database check hits an in-memory SQLite database."""
    return Settings(HEALTHZ_DB_URL="sqlite://")


def _read_commands(reader):
    """Yield RESP commands (lists of bytes) until the client hangs up."""
    while True:
        header = reader.readline()
        if not header.startswith(b"*"):
            return
        args = []
        for _ in range(int(header[1:])):
            length = int(reader.readline()[1:])
            args.append(reader.read(length + 2)[:-2])
        yield args


class FakeRedis:
    """A tiny single-threaded RESP server on 127.0.0.1.

    PING gets ``ping_reply``; every other command (AUTH, CLIENT SETINFO, ...)
    gets ``+OK``. Received commands are kept in ``commands``.
    """

    def __init__(self, ping_reply: bytes = b"+PONG\r\n"):
        self.ping_reply = ping_reply
        self.commands: list[list[bytes]] = []
        self._stop = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(4)
        self._sock.settimeout(0.1)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def command_names(self) -> list[bytes]:
        return [command[0].upper() for command in self.commands]

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            conn.settimeout(5)
            try:
                with conn, conn.makefile("rb") as reader:
                    for command in _read_commands(reader):
                        self.commands.append(command)
                        if command[0].upper() == b"PING":
                            conn.sendall(self.ping_reply)
                        else:
                            conn.sendall(b"+OK\r\n")
            except OSError:
                # client 斷線
                continue

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self._sock.close()


@pytest.fixture
def fake_redis():
    """Factory fixture: ``fake_redis(ping_reply=...)`` starts a FakeRedis."""
    servers = []

    def start(ping_reply: bytes = b"+PONG\r\n") -> FakeRedis:
        server = FakeRedis(ping_reply)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()
