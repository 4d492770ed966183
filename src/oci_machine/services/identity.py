"""Identity service operations for OCI."""

import logging
from typing import List

import oci
import requests
from oci.pagination import list_call_get_all_results

from ..errors import ProviderError, retry_transient

logger = logging.getLogger(__name__)


class IdentityService:
    """Service class for identity-related operations."""

    def __init__(self, identity_client: oci.identity.IdentityClient):
        """Initialize identity service."""
        self.identity_client = identity_client

    @retry_transient
    def list_compartments(
        self,
        tenancy_id: str,
        compartment_id_in_subtree: bool = True,
        access_level: str = "ACCESSIBLE",
    ) -> List[oci.identity.models.Compartment]:
        """List every compartment under the tenancy root, across all pages."""
        try:
            return list_call_get_all_results(
                self.identity_client.list_compartments,
                compartment_id=tenancy_id,
                compartment_id_in_subtree=compartment_id_in_subtree,
                access_level=access_level,
            ).data
        except (oci.exceptions.ServiceError, requests.exceptions.RequestException) as e:
            logger.error(f"Failed to list compartments: {e}")
            raise ProviderError("list compartments", e) from e

    @retry_transient
    def list_availability_domains(self, compartment_id: str) -> List[str]:
        """List availability domain names visible to a compartment."""
        try:
            ads = self.identity_client.list_availability_domains(compartment_id).data
            return [ad.name for ad in ads]
        except (oci.exceptions.ServiceError, requests.exceptions.RequestException) as e:
            logger.error(f"Failed to list availability domains: {e}")
            raise ProviderError("list availability domains", e) from e
