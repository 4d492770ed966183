"""Virtual network operations for OCI."""

import logging
from typing import List

import oci
import requests
from oci.pagination import list_call_get_all_results

from ..errors import AddressUnresolvedError, ProviderError, retry_transient

logger = logging.getLogger(__name__)

_REQUEST_ERRORS = (oci.exceptions.ServiceError, requests.exceptions.RequestException)


class NetworkService:
    """Service class for VCN, subnet and VNIC lookups."""

    def __init__(
        self,
        compute_client: oci.core.ComputeClient,
        network_client: oci.core.VirtualNetworkClient,
    ):
        """Initialize network service."""
        self.compute_client = compute_client
        self.network_client = network_client

    @retry_transient
    def list_vcns(self, compartment_id: str) -> List[oci.core.models.Vcn]:
        """List every VCN in a compartment."""
        try:
            return list_call_get_all_results(
                self.network_client.list_vcns, compartment_id=compartment_id
            ).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to list VCNs in {compartment_id}: {e}")
            raise ProviderError("list VCNs", e) from e

    @retry_transient
    def list_subnets(self, compartment_id: str, vcn_id: str) -> List[oci.core.models.Subnet]:
        """List every subnet of a VCN."""
        try:
            return list_call_get_all_results(
                self.network_client.list_subnets,
                compartment_id=compartment_id,
                vcn_id=vcn_id,
            ).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to list subnets of {vcn_id}: {e}")
            raise ProviderError("list subnets", e) from e

    @retry_transient
    def list_vnic_attachments(
        self, compartment_id: str, instance_id: str
    ) -> List[oci.core.models.VnicAttachment]:
        """List the VNIC attachments of an instance."""
        try:
            return list_call_get_all_results(
                self.compute_client.list_vnic_attachments,
                compartment_id=compartment_id,
                instance_id=instance_id,
            ).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to list VNIC attachments for {instance_id}: {e}")
            raise ProviderError(f"list VNIC attachments for {instance_id}", e) from e

    @retry_transient
    def get_vnic(self, vnic_id: str) -> oci.core.models.Vnic:
        """Fetch VNIC details."""
        try:
            return self.network_client.get_vnic(vnic_id).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to get VNIC {vnic_id}: {e}")
            raise ProviderError(f"get VNIC {vnic_id}", e) from e

    def resolve_public_address(self, compartment_id: str, instance_id: str) -> str:
        """
        Resolve the public IP of an instance.

        Only the first VNIC attachment is considered; secondary VNICs are
        ignored. Raises AddressUnresolvedError when the instance has no
        attachment yet or its VNIC carries no public IP.
        """
        attachments = self.list_vnic_attachments(compartment_id, instance_id)
        if not attachments:
            raise AddressUnresolvedError(f"Instance {instance_id} has no VNIC attachments yet")

        vnic_id = attachments[0].vnic_id
        if not vnic_id:
            raise AddressUnresolvedError(
                f"VNIC attachment {attachments[0].id} of instance {instance_id} has no VNIC yet"
            )

        vnic = self.get_vnic(vnic_id)
        if not vnic.public_ip:
            raise AddressUnresolvedError(f"VNIC {vnic_id} of instance {instance_id} has no public IP")

        logger.info(f"Instance {instance_id} public IP resolved to {vnic.public_ip}")
        return vnic.public_ip
