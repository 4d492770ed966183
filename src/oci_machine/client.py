"""OCI SDK client wiring for the machine driver."""

import logging
from typing import Any, Dict, Optional

import oci

from .auth import OCIAuthenticator
from .models import OCIConfig
from .services import ComputeService, IdentityService, NetworkService

logger = logging.getLogger(__name__)


class OCIClient:
    """Authenticated holder of the OCI service clients the driver uses."""

    def __init__(
        self,
        region: Optional[str] = None,
        profile_name: str = "DEFAULT",
        config_file: Optional[str] = None,
        retry_strategy: Optional[oci.retry.RetryStrategyBuilder] = None,
    ):
        """
        Initialize OCI client with authentication.

        Args:
            region: OCI region name; defaults to the profile's region
            profile_name: OCI config profile name
            config_file: Optional path to config file (defaults to ~/.oci/config)
            retry_strategy: Optional transport retry strategy for API calls
        """
        self.config = OCIConfig(region=region, profile_name=profile_name, config_file=config_file)
        self.authenticator = OCIAuthenticator(self.config)
        self.oci_config: Dict[str, Any] = {}
        self.signer: Optional[Any] = None

        self.retry_strategy = retry_strategy or oci.retry.DEFAULT_RETRY_STRATEGY

        # Service clients are created on first use
        self._compute_client: Optional[oci.core.ComputeClient] = None
        self._identity_client: Optional[oci.identity.IdentityClient] = None
        self._network_client: Optional[oci.core.VirtualNetworkClient] = None

        self.oci_config, self.signer = self.authenticator.authenticate()

    @property
    def tenancy_id(self) -> str:
        """OCID of the tenancy root compartment."""
        return self.oci_config["tenancy"]

    @property
    def compute_client(self) -> oci.core.ComputeClient:
        """Lazy-load compute client."""
        if not self._compute_client:
            self._compute_client = oci.core.ComputeClient(
                self.oci_config, signer=self.signer, retry_strategy=self.retry_strategy
            )
        return self._compute_client

    @property
    def identity_client(self) -> oci.identity.IdentityClient:
        """Lazy-load identity client."""
        if not self._identity_client:
            self._identity_client = oci.identity.IdentityClient(
                self.oci_config, signer=self.signer, retry_strategy=self.retry_strategy
            )
        return self._identity_client

    @property
    def network_client(self) -> oci.core.VirtualNetworkClient:
        """Lazy-load network client."""
        if not self._network_client:
            self._network_client = oci.core.VirtualNetworkClient(
                self.oci_config, signer=self.signer, retry_strategy=self.retry_strategy
            )
        return self._network_client

    def identity_service(self) -> IdentityService:
        return IdentityService(self.identity_client)

    def compute_service(self) -> ComputeService:
        return ComputeService(self.compute_client)

    def network_service(self) -> NetworkService:
        return NetworkService(self.compute_client, self.network_client)
