# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/remote/client.py

"""SSH/SFTP session to a remote host, on top of paramiko."""

import shlex
import socket
from pathlib import Path
from typing import Optional

import paramiko
from loguru import logger
from pydantic import BaseModel, Field

from stowage.core.retry import SSH_CONNECT_RETRY, retrying
from stowage.system.exceptions import (
    AuthenticationError, ConnectionTimeoutError, NetworkError
)


class RemoteOptions(BaseModel):
    """How to reach a remote host."""
    host: str
    port: int = Field(default=22, ge=1, le=65535)
    username: Optional[str] = None
    private_keys: list[Path] = Field(default_factory=list)


class RemoteClient:
    """A connected SSH session with lazy SFTP."""

    def __init__(self, options: RemoteOptions, timeout: float = 10.0) -> None:
        self.options = options
        self.timeout = timeout
        self._client: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    @property
    def target(self) -> str:
        user = f"{self.options.username}@" if self.options.username else ""
        return f"{user}{self.options.host}:{self.options.port}"

    @retrying(SSH_CONNECT_RETRY, "SSH connect")
    def connect(self) -> "RemoteClient":
        """Open the SSH session. Transient network errors are retried."""
        if self._client is not None:
            return self

        keys = [str(k) for k in self.options.private_keys]
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                self.options.host,
                port=self.options.port,
                username=self.options.username,
                key_filename=keys or None,
                # Explicit keys mean don't go hunting for others
                look_for_keys=not keys,
                allow_agent=not keys,
                timeout=self.timeout,
            )
        except paramiko.AuthenticationException as e:
            client.close()
            raise AuthenticationError(f"SSH authentication failed for {self.target}: {e}") from e
        except socket.timeout as e:
            client.close()
            raise ConnectionTimeoutError(f"Timed out connecting to {self.target}") from e
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise NetworkError(f"SSH connection to {self.target} failed: {e}") from e

        logger.debug(f"Connected to {self.target}")
        self._client = client
        return self

    def _require_client(self) -> paramiko.SSHClient:
        if self._client is None:
            raise RuntimeError("Remote session not connected - call connect() first")
        return self._client

    def sftp(self) -> paramiko.SFTPClient:
        """SFTP channel on this session, opened on first use."""
        if self._sftp is None:
            self._sftp = self._require_client().open_sftp()
        return self._sftp

    def run_command(self, args: list[str]) -> tuple[int, str, str]:
        """Execute a command on the remote host.

        Returns:
            (exit_code, stdout, stderr)
        """
        command = shlex.join(args)
        logger.debug(f"Running on {self.options.host}: {command}")
        stdin, stdout, stderr = self._require_client().exec_command(command)
        exit_code = stdout.channel.recv_exit_status()
        return exit_code, stdout.read().decode('utf-8'), stderr.read().decode('utf-8')

    def close(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "RemoteClient":
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
