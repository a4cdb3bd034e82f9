"""
Lifecycle management for a single-node TigerBeetle cluster.

The harness formats a fresh data file, launches the server as a child
process, and waits until the server accepts TCP connections before any client
is opened. The process handle is kept so the server is stopped on every exit
path.
"""

from __future__ import annotations

import socket
import subprocess
import time
from pathlib import Path
from typing import List, Optional, Tuple

from tenacity import Retrying, retry_if_exception_type, stop_after_delay, wait_exponential

from ledger_bench.config import Settings
from ledger_bench.errors import BackendStartupError
from ledger_bench.utils.logging import get_logger

log = get_logger(__name__)

_STOP_TIMEOUT_SECONDS = 5.0


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a TigerBeetle replica address into host and port.

    A bare port (e.g. "3000") refers to localhost.
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        return "127.0.0.1", int(address)
    return host or "127.0.0.1", int(port)


class TigerBeetleServer:
    """
    Format, start, probe and stop a local TigerBeetle replica.

    Usage
    -----
        server = TigerBeetleServer.from_settings(get_settings())
        server.start()
        try:
            ...
        finally:
            server.stop()
    """

    def __init__(
        self,
        binary: str,
        data_file: str | Path,
        address: str = "3000",
        cluster_id: int = 0,
        replica: int = 0,
        replica_count: int = 1,
        clean_data_file: bool = True,
        ready_timeout_seconds: float = 10.0,
        settle_seconds: float = 0.0,
    ) -> None:
        self.binary = binary
        self.data_file = Path(data_file)
        self.address = address
        self.cluster_id = cluster_id
        self.replica = replica
        self.replica_count = replica_count
        self.clean_data_file = clean_data_file
        self.ready_timeout_seconds = ready_timeout_seconds
        self.settle_seconds = settle_seconds
        self._process: Optional[subprocess.Popen] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "TigerBeetleServer":
        return cls(
            binary=settings.tb_binary,
            data_file=settings.tb_data_file,
            address=settings.tb_address,
            cluster_id=settings.tb_cluster_id,
            replica=settings.tb_replica,
            replica_count=settings.tb_replica_count,
            clean_data_file=settings.tb_clean_data_file,
            ready_timeout_seconds=settings.tb_ready_timeout_seconds,
            settle_seconds=settings.tb_settle_seconds,
        )

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def format_command(self) -> List[str]:
        return [
            self.binary,
            "format",
            f"--cluster={self.cluster_id}",
            f"--replica={self.replica}",
            f"--replica-count={self.replica_count}",
            "--development",
            str(self.data_file),
        ]

    def start_command(self) -> List[str]:
        return [
            self.binary,
            "start",
            f"--addresses={self.address}",
            "--development",
            str(self.data_file),
        ]

    def format(self) -> None:
        """Create the data file, removing a residual one first when configured."""
        if self.data_file.exists():
            if not self.clean_data_file:
                raise BackendStartupError(
                    f"TigerBeetle data file {self.data_file} already exists "
                    "and TB_CLEAN_DATA_FILE is disabled"
                )
            log.info("Removing residual TigerBeetle data file", extra={"path": str(self.data_file)})
            self.data_file.unlink()

        try:
            subprocess.run(self.format_command(), check=True, capture_output=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise BackendStartupError(f"Failed to format TigerBeetle: {exc}") from exc

    def start(self) -> None:
        """Format the data file, launch the server and wait until it is reachable."""
        if self.running:
            return
        self.format()
        log.info("[BOOTSTRAP] Starting TigerBeetle", extra={"command": self.start_command()})
        try:
            self._process = subprocess.Popen(
                self.start_command(),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise BackendStartupError(f"Failed to start TigerBeetle: {exc}") from exc

        try:
            self.wait_ready()
        except BackendStartupError:
            self.stop()
            raise

        if self.settle_seconds > 0:
            time.sleep(self.settle_seconds)

    def _probe_once(self) -> None:
        if self._process is not None and self._process.poll() is not None:
            raise BackendStartupError(
                f"TigerBeetle exited during startup with code {self._process.returncode}"
            )
        host, port = parse_address(self.address)
        with socket.create_connection((host, port), timeout=1.0):
            pass

    def wait_ready(self) -> None:
        """
        Poll the server address with bounded exponential backoff.

        Raises
        ------
        BackendStartupError
            If the process exits or the port is not reachable within
            `ready_timeout_seconds`.
        """
        retryer = Retrying(
            stop=stop_after_delay(self.ready_timeout_seconds),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1.0),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            retryer(self._probe_once)
        except OSError as exc:
            raise BackendStartupError(
                f"TigerBeetle not reachable at {self.address} after "
                f"{self.ready_timeout_seconds}s: {exc}"
            ) from exc
        log.info("[BOOTSTRAP] TigerBeetle is accepting connections", extra={"address": self.address})

    def stop(self) -> None:
        """Terminate the server process; kill it if it does not exit in time."""
        process, self._process = self._process, None
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=_STOP_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            log.warning("TigerBeetle did not exit after SIGTERM; killing", extra={"pid": process.pid})
            process.kill()
            process.wait()
        log.info("[TEARDOWN] TigerBeetle stopped", extra={"pid": process.pid})


__all__ = ["TigerBeetleServer", "parse_address"]
