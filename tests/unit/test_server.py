"""
Unit Tests for the server process lifecycle
"""

import errno
import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path
from unittest.mock import Mock, patch

import httpx
import pytest
import uvicorn

from tubescout.app.config import Config
from tubescout.app.server import GracefulServer, bind_socket, run

ROOT_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture
def bound_socket():
    """A listening socket on an ephemeral loopback port"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock
    sock.close()


@pytest.fixture
def server():
    return GracefulServer(
        uvicorn.Config("tubescout.app.main:app", host="127.0.0.1", port=0),
        grace_period=5.0,
    )


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestPortBinding:
    """Test startup port binding"""

    def test_taken_port_raises_addr_in_use(self, bound_socket):
        port = bound_socket.getsockname()[1]

        with pytest.raises(OSError) as exc_info:
            bind_socket("127.0.0.1", port)

        assert exc_info.value.errno == errno.EADDRINUSE

    def test_free_port_returns_bound_socket(self):
        port = free_port()
        sock = bind_socket("127.0.0.1", port)
        try:
            assert sock.getsockname() == ("127.0.0.1", port)
        finally:
            sock.close()

    def test_run_exits_with_failure_when_port_taken(self, monkeypatch, bound_socket):
        monkeypatch.setenv("API_HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", str(bound_socket.getsockname()[1]))

        with patch("tubescout.app.server.GracefulServer") as server_cls:
            assert run(Config()) == 1

        server_cls.assert_not_called()

    def test_run_serves_on_prebound_socket(self, monkeypatch):
        monkeypatch.setenv("API_HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", str(free_port()))

        with patch("tubescout.app.server.GracefulServer") as server_cls:
            instance = server_cls.return_value
            instance.started = True
            instance.exit_code = 0

            assert run(Config()) == 0

        sockets = instance.run.call_args.kwargs["sockets"]
        assert len(sockets) == 1
        assert sockets[0].fileno() == -1  # closed once serving ends
        instance.cancel_force_exit.assert_called_once()


class TestGracefulShutdown:
    """Test shutdown coordination"""

    def test_request_shutdown_sets_flag_and_arms_timer(self, server):
        with patch("tubescout.app.server.threading.Timer") as timer_cls:
            server.request_shutdown("SIGTERM")

        assert server.should_exit is True
        assert server.exit_code == 0
        assert server.shutdown_reason == "SIGTERM"
        timer_cls.assert_called_once_with(5.0, server._force_exit)
        timer_cls.return_value.start.assert_called_once()
        assert timer_cls.return_value.daemon is True

    def test_second_request_does_not_rearm(self, server):
        with patch("tubescout.app.server.threading.Timer") as timer_cls:
            server.request_shutdown("SIGTERM")
            server.request_shutdown("SIGINT")

        assert server.shutdown_reason == "SIGTERM"
        assert timer_cls.call_count == 1

    def test_first_sigint_drains_instead_of_forcing(self, server):
        with patch("tubescout.app.server.threading.Timer"):
            server.handle_exit(signal.SIGINT, None)

        assert server.should_exit is True
        assert server.force_exit is False
        assert server.shutdown_reason == "SIGINT"
        assert server.exit_code == 0

    def test_capture_signals_restores_handlers(self, server):
        before = signal.getsignal(signal.SIGTERM)

        with server.capture_signals():
            assert signal.getsignal(signal.SIGTERM) == server.handle_exit

        assert signal.getsignal(signal.SIGTERM) == before

    def test_cancel_force_exit(self, server):
        with patch("tubescout.app.server.threading.Timer") as timer_cls:
            server.request_shutdown("SIGTERM")
            server.cancel_force_exit()

        timer_cls.return_value.cancel.assert_called_once()

    def test_loop_exception_marks_failure(self, server):
        with patch("tubescout.app.server.threading.Timer"):
            server.handle_loop_exception(
                Mock(), {"message": "Task exception was never retrieved", "exception": RuntimeError("x")}
            )

        assert server.should_exit is True
        assert server.exit_code == 1
        assert server.shutdown_reason == "unhandled async error"

    def test_loop_exception_after_signal_still_fails(self, server):
        with patch("tubescout.app.server.threading.Timer"):
            server.request_shutdown("SIGTERM")
            server.handle_loop_exception(Mock(), {"exception": RuntimeError("late")})

        assert server.exit_code == 1

    def test_force_exit(self, server):
        with patch("tubescout.app.server.os._exit") as exit_mock:
            server._force_exit()

        exit_mock.assert_called_once_with(1)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
class TestProcessShutdown:
    """Run the real server process and stop it with a signal"""

    def start_server(self, port):
        env = {
            k: v
            for k, v in os.environ.items()
            if k not in ("APP_ENV", "YOUTUBE_API_KEY", "API_PORT")
        }
        env.update({"PORT": str(port), "API_HOST": "127.0.0.1", "LOG_LEVEL": "INFO"})
        process = subprocess.Popen(
            [sys.executable, "-m", "tubescout"],
            cwd=ROOT_DIR,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )

        deadline = time.monotonic() + 20
        while time.monotonic() < deadline:
            if process.poll() is not None:
                break
            try:
                if httpx.get(
                    f"http://127.0.0.1:{port}/health", timeout=1, trust_env=False
                ).status_code == 200:
                    return process
            except httpx.HTTPError:
                time.sleep(0.1)

        process.kill()
        output, _ = process.communicate()
        pytest.fail(f"server did not become healthy:\n{output}")

    @pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
    def test_signal_exits_cleanly(self, sig):
        process = self.start_server(free_port())

        process.send_signal(sig)
        try:
            output, _ = process.communicate(timeout=15)
        except subprocess.TimeoutExpired:
            process.kill()
            raise

        assert process.returncode == 0, output
        assert "Server closed successfully" in output
        assert "Traceback" not in output
