"""Authentication module for the OCI machine driver."""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Tuple

import oci
from oci.auth.signers import SecurityTokenSigner
from oci.signer import Signer
from rich.console import Console

from .errors import AuthenticationError
from .models import AuthType, OCIConfig

logger = logging.getLogger(__name__)
console = Console(stderr=True)

DEFAULT_CONFIG_FILE = Path.home() / ".oci" / "config"
SESSION_TOKEN_MAX_AGE_HOURS = 1


class OCIAuthenticator:
    """Load an OCI profile and build the matching request signer."""

    def __init__(self, config: OCIConfig):
        """Initialize authenticator with configuration."""
        self.config = config

    def authenticate(self) -> Tuple[Dict[str, Any], Any]:
        """
        Load the profile and return its config dict and signer.

        Raises:
            AuthenticationError: If the profile cannot be loaded or signed for
        """
        try:
            oci_config = self._load_config()
            auth_type = self._determine_auth_type()
            signer = self._create_signer(auth_type)
        except (oci.exceptions.ClientError, OSError, ValueError) as e:
            logger.error(f"Authentication failed: {e}")
            self._print_auth_help()
            raise AuthenticationError(f"Failed to authenticate with OCI: {e}") from e

        self.config.auth_type = auth_type
        logger.debug(
            "Authenticated with %s for profile '%s'", auth_type.value, self.config.profile_name
        )
        return oci_config, signer

    def _config_file(self) -> Path:
        if self.config.config_file:
            return Path(self.config.config_file).expanduser()
        return DEFAULT_CONFIG_FILE

    def _load_config(self) -> Dict[str, Any]:
        """Load OCI configuration from file."""
        config_file = self._config_file()
        if not config_file.exists():
            raise FileNotFoundError(f"OCI config file not found: {config_file}")

        oci_config = oci.config.from_file(
            file_location=str(config_file),
            profile_name=self.config.profile_name,
        )

        if self.config.region:
            oci_config["region"] = self.config.region

        self.config.tenancy = oci_config.get("tenancy")
        self.config.user = oci_config.get("user")
        self.config.fingerprint = oci_config.get("fingerprint")
        self.config.key_file = oci_config.get("key_file")
        self.config.security_token_file = oci_config.get("security_token_file")
        self.config.pass_phrase = oci_config.get("pass_phrase")

        return oci_config

    def _determine_auth_type(self) -> AuthType:
        """Determine the authentication type from config."""
        if self.config.security_token_file:
            token_file = Path(self.config.security_token_file).expanduser()
            if not token_file.exists():
                raise FileNotFoundError(
                    f"Security token file not found: {token_file}\n"
                    f"Please run: oci session authenticate --profile-name {self.config.profile_name}"
                )

            token_age_hours = (time.time() - token_file.stat().st_mtime) / 3600
            if token_age_hours > SESSION_TOKEN_MAX_AGE_HOURS:
                logger.warning(
                    f"Security token may be expired (created {token_age_hours:.1f} hours ago)"
                )
            return AuthType.SESSION_TOKEN

        if self.config.key_file and self.config.fingerprint:
            key_file = Path(self.config.key_file).expanduser()
            if not key_file.exists():
                raise FileNotFoundError(f"Private key file not found: {key_file}")
            return AuthType.API_KEY

        raise ValueError(
            f"Unable to determine auth type for profile '{self.config.profile_name}'. "
            f"Config must have either security_token_file or (key_file + fingerprint)."
        )

    def _create_signer(self, auth_type: AuthType) -> Any:
        """Create appropriate signer based on auth type."""
        if auth_type == AuthType.SESSION_TOKEN:
            return self._create_session_token_signer()
        return self._create_api_key_signer()

    def _create_session_token_signer(self) -> SecurityTokenSigner:
        """Create a session token signer."""
        with open(Path(self.config.security_token_file).expanduser(), "r") as f:
            token = f.read().strip()

        private_key = oci.signer.load_private_key_from_file(
            self.config.key_file,
            pass_phrase=self.config.pass_phrase,
        )
        return SecurityTokenSigner(token, private_key)

    def _create_api_key_signer(self) -> Signer:
        """Create an API key signer."""
        return Signer(
            tenancy=self.config.tenancy,
            user=self.config.user,
            fingerprint=self.config.fingerprint,
            private_key_file_location=self.config.key_file,
            pass_phrase=self.config.pass_phrase,
        )

    def _print_auth_help(self) -> None:
        """Print authentication setup instructions."""
        console.print("\n[red]Authentication Setup Instructions:[/red]")
        console.print(
            f"\n1. For session token authentication:\n"
            f"   [cyan]oci session authenticate --profile-name {self.config.profile_name}"
            f"{' --region ' + self.config.region if self.config.region else ''}[/cyan]\n"
        )
        console.print(
            f"2. For API key authentication, add to {self._config_file()}:\n"
            f"     [cyan][{self.config.profile_name}]\n"
            f"     user=<your-user-ocid>\n"
            f"     fingerprint=<your-key-fingerprint>\n"
            f"     tenancy=<your-tenancy-ocid>\n"
            f"     region=<region>\n"
            f"     key_file=<path-to-private-key>[/cyan]\n"
        )
