"""Tests for authentication module."""

import os
import time
from unittest.mock import patch

import oci
import pytest

from src.oci_machine.auth import OCIAuthenticator
from src.oci_machine.errors import AuthenticationError
from src.oci_machine.models import AuthType, OCIConfig


class TestOCIAuthenticator:
    """Test OCI Authenticator."""

    @pytest.fixture
    def config_file(self, tmp_path):
        path = tmp_path / "config"
        path.write_text("[DEFAULT]\n")
        return path

    @pytest.fixture
    def key_file(self, tmp_path):
        path = tmp_path / "oci_api_key.pem"
        path.write_text("key")
        return path

    @pytest.fixture
    def api_key_config(self, key_file):
        return {
            "user": "ocid1.user.oc1..xxxxx",
            "fingerprint": "aa:bb:cc:dd:ee:ff",
            "tenancy": "ocid1.tenancy.oc1..xxxxx",
            "region": "us-ashburn-1",
            "key_file": str(key_file),
        }

    @patch("src.oci_machine.auth.Signer")
    @patch("src.oci_machine.auth.oci.config.from_file")
    def test_authenticate_api_key(self, mock_from_file, mock_signer, config_file, api_key_config):
        mock_from_file.return_value = api_key_config
        config = OCIConfig(profile_name="test_profile", config_file=str(config_file))

        oci_config, signer = OCIAuthenticator(config).authenticate()

        assert oci_config["tenancy"] == "ocid1.tenancy.oc1..xxxxx"
        assert signer is mock_signer.return_value
        assert config.auth_type == AuthType.API_KEY
        mock_from_file.assert_called_once_with(file_location=str(config_file), profile_name="test_profile")

    @patch("src.oci_machine.auth.Signer")
    @patch("src.oci_machine.auth.oci.config.from_file")
    def test_region_override(self, mock_from_file, mock_signer, config_file, api_key_config):
        mock_from_file.return_value = api_key_config
        config = OCIConfig(region="us-phoenix-1", config_file=str(config_file))

        oci_config, _ = OCIAuthenticator(config).authenticate()

        assert oci_config["region"] == "us-phoenix-1"

    @patch("src.oci_machine.auth.SecurityTokenSigner")
    @patch("src.oci_machine.auth.oci.signer.load_private_key_from_file")
    @patch("src.oci_machine.auth.oci.config.from_file")
    def test_authenticate_session_token(
        self, mock_from_file, mock_load_key, mock_token_signer, tmp_path, config_file, api_key_config
    ):
        token_file = tmp_path / "token"
        token_file.write_text("session-token\n")
        mock_from_file.return_value = dict(api_key_config, security_token_file=str(token_file))
        config = OCIConfig(config_file=str(config_file))

        _, signer = OCIAuthenticator(config).authenticate()

        assert signer is mock_token_signer.return_value
        mock_token_signer.assert_called_once_with("session-token", mock_load_key.return_value)
        assert config.auth_type == AuthType.SESSION_TOKEN

    def test_old_session_token_warns(self, tmp_path, caplog):
        token_file = tmp_path / "token"
        token_file.write_text("session-token")
        two_hours_ago = time.time() - 7200
        os.utime(token_file, (two_hours_ago, two_hours_ago))
        auth = OCIAuthenticator(OCIConfig(security_token_file=str(token_file)))

        assert auth._determine_auth_type() == AuthType.SESSION_TOKEN
        assert "may be expired" in caplog.text

    def test_missing_token_file(self, tmp_path):
        auth = OCIAuthenticator(OCIConfig(security_token_file=str(tmp_path / "missing")))

        with pytest.raises(FileNotFoundError, match="oci session authenticate"):
            auth._determine_auth_type()

    def test_no_credentials(self):
        auth = OCIAuthenticator(OCIConfig(profile_name="empty"))

        with pytest.raises(ValueError, match="Unable to determine auth type"):
            auth._determine_auth_type()

    @patch.object(OCIAuthenticator, "_print_auth_help")
    def test_missing_config_file(self, mock_help, tmp_path):
        config = OCIConfig(config_file=str(tmp_path / "missing"))

        with pytest.raises(AuthenticationError, match="OCI config file not found"):
            OCIAuthenticator(config).authenticate()

        mock_help.assert_called_once()

    @patch.object(OCIAuthenticator, "_print_auth_help")
    @patch("src.oci_machine.auth.oci.config.from_file")
    def test_missing_profile(self, mock_from_file, mock_help, config_file):
        mock_from_file.side_effect = oci.exceptions.ProfileNotFound("Profile empty not found")

        with pytest.raises(AuthenticationError):
            OCIAuthenticator(OCIConfig(config_file=str(config_file))).authenticate()
