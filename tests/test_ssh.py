"""Tests for SSH helpers."""

import subprocess
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from src.oci_machine.errors import ConfigurationError, RemoteCommandError
from src.oci_machine.ssh import SSHCommandRunner, docker_port_firewall_commands, ensure_ssh_key


class TestEnsureSSHKey:
    """Test SSH key generation."""

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_existing_key_is_reused(self, mock_run, tmp_path):
        key_path = tmp_path / "id_rsa"
        key_path.write_text("private")
        (tmp_path / "id_rsa.pub").write_text("ssh-rsa AAAA test\n")

        assert ensure_ssh_key(key_path) == "ssh-rsa AAAA test"
        mock_run.assert_not_called()

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_missing_key_is_generated(self, mock_run, tmp_path):
        key_path = tmp_path / "machines" / "test-machine" / "id_rsa"

        def fake_keygen(cmd, check):
            key_path.write_text("private")
            key_path.with_name("id_rsa.pub").write_text("ssh-rsa BBBB\n")

        mock_run.side_effect = fake_keygen

        assert ensure_ssh_key(key_path) == "ssh-rsa BBBB"
        cmd = mock_run.call_args.args[0]
        assert cmd[0] == "ssh-keygen"
        assert str(key_path) in cmd

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_existing_key_without_public_half(self, mock_run, tmp_path):
        key_path = tmp_path / "id_rsa"
        key_path.write_text("private")

        with pytest.raises(ConfigurationError, match="Cannot read public key"):
            ensure_ssh_key(key_path)

        mock_run.assert_not_called()

    @patch("src.oci_machine.ssh.subprocess.run", side_effect=FileNotFoundError("ssh-keygen"))
    def test_missing_keygen(self, mock_run, tmp_path):
        with pytest.raises(ConfigurationError, match="Failed to generate SSH key"):
            ensure_ssh_key(tmp_path / "id_rsa")


class TestSSHCommandRunner:
    """Test remote command execution."""

    @pytest.fixture
    def runner(self):
        return SSHCommandRunner("203.0.113.5", "opc", "/tmp/id_rsa", port=2222)

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_run(self, mock_run, runner):
        mock_run.return_value = SimpleNamespace(returncode=0, stdout="success\n")

        assert runner.run("uptime") == "success\n"
        cmd = mock_run.call_args.args[0]
        assert cmd[0] == "ssh"
        assert cmd[-2:] == ["opc@203.0.113.5", "uptime"]
        assert "2222" in cmd
        assert "/tmp/id_rsa" in cmd

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_run_failure(self, mock_run, runner):
        mock_run.return_value = SimpleNamespace(returncode=1, stdout="FirewallD is not running\n")

        with pytest.raises(RemoteCommandError) as exc_info:
            runner.run("sudo firewall-cmd --reload")

        assert exc_info.value.returncode == 1
        assert "FirewallD is not running" in str(exc_info.value)

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_run_timeout(self, mock_run, runner):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ssh", timeout=300)

        with pytest.raises(RemoteCommandError, match="timed out"):
            runner.run("uptime")

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_run_all_stops_on_first_failure(self, mock_run, runner):
        mock_run.side_effect = [
            SimpleNamespace(returncode=0, stdout="success\n"),
            SimpleNamespace(returncode=252, stdout="failed\n"),
            SimpleNamespace(returncode=0, stdout="never\n"),
        ]

        with pytest.raises(RemoteCommandError):
            runner.run_all(["one", "two", "three"])

        assert mock_run.call_count == 2

    @patch("src.oci_machine.ssh.subprocess.run")
    def test_run_all(self, mock_run, runner):
        mock_run.return_value = SimpleNamespace(returncode=0, stdout="success\n")

        assert runner.run_all(docker_port_firewall_commands(2376)) == "success\nsuccess\n"
        assert mock_run.call_count == 2
