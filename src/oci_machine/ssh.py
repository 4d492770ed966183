"""
SSH helpers: key generation and remote command execution on the instance.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Sequence

from .errors import ConfigurationError, RemoteCommandError

logger = logging.getLogger(__name__)

SSH_OPTIONS = [
    "-o", "StrictHostKeyChecking=no",
    "-o", "UserKnownHostsFile=/dev/null",
    "-o", "LogLevel=quiet",
    "-o", "ConnectTimeout=10",
]


def ensure_ssh_key(key_path: Path) -> str:
    """Return the public key for ``key_path``, generating the pair if needed."""
    pub_key_path = key_path.with_name(key_path.name + ".pub")

    if not key_path.exists():
        key_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        logger.info(f"Generating SSH key {key_path}")
        try:
            subprocess.run(
                [
                    "ssh-keygen",
                    "-t", "rsa",
                    "-b", "4096",
                    "-f", str(key_path),
                    "-N", "",  # No passphrase
                    "-q",
                ],
                check=True,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise ConfigurationError(f"Failed to generate SSH key {key_path}: {e}") from e

    try:
        with open(pub_key_path, "r") as f:
            return f.read().strip()
    except OSError as e:
        raise ConfigurationError(f"Cannot read public key {pub_key_path}: {e}") from e


def docker_port_firewall_commands(port: int) -> List[str]:
    """firewalld commands that open the Docker engine port on Oracle Linux."""
    return [
        f"sudo firewall-cmd --zone=public --add-port={port}/tcp --permanent",
        "sudo firewall-cmd --reload",
    ]


class SSHCommandRunner:
    """Run shell commands on the instance over SSH."""

    def __init__(self, hostname: str, username: str, key_path: str, port: int = 22, timeout: int = 300):
        self.hostname = hostname
        self.username = username
        self.key_path = key_path
        self.port = port
        self.timeout = timeout

    def _ssh_command(self, command: str) -> List[str]:
        return [
            "ssh",
            *SSH_OPTIONS,
            "-i", self.key_path,
            "-p", str(self.port),
            f"{self.username}@{self.hostname}",
            command,
        ]

    def run(self, command: str) -> str:
        """
        Run one command and return its combined output.

        Raises:
            RemoteCommandError: If the command exits non-zero or times out
        """
        logger.debug(f"Running on {self.hostname}: {command}")
        try:
            result = subprocess.run(
                self._ssh_command(command),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise RemoteCommandError(command, -1, f"timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise RemoteCommandError(command, result.returncode, result.stdout or "")
        return result.stdout or ""

    def run_all(self, commands: Sequence[str]) -> str:
        """Run commands in order, stopping at the first failure."""
        outputs = []
        for command in commands:
            outputs.append(self.run(command))
        return "".join(outputs)
