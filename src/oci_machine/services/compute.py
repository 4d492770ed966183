"""Compute service operations for OCI."""

import logging
from typing import List, Optional

import oci
import requests
from oci.pagination import list_call_get_all_results

from ..errors import ProviderError, retry_transient
from ..models import InstanceAction, MachineConfig

logger = logging.getLogger(__name__)

_REQUEST_ERRORS = (oci.exceptions.ServiceError, requests.exceptions.RequestException)


def build_launch_details(
    config: MachineConfig,
    display_name: str,
    ssh_public_key: Optional[str] = None,
) -> oci.core.models.LaunchInstanceDetails:
    """Build the launch request for a resolved configuration."""
    metadata = {}
    if ssh_public_key:
        metadata["ssh_authorized_keys"] = ssh_public_key

    return oci.core.models.LaunchInstanceDetails(
        compartment_id=config.compartment_id,
        availability_domain=config.availability_domain,
        fault_domain=config.fault_domain,
        shape=config.shape,
        display_name=display_name,
        source_details=oci.core.models.InstanceSourceViaImageDetails(
            image_id=config.image_id,
        ),
        create_vnic_details=oci.core.models.CreateVnicDetails(
            subnet_id=config.subnet_id,
            assign_public_ip=True,
        ),
        metadata=metadata,
    )


class ComputeService:
    """Service class for compute-related operations.

    Reads retry on transient failures. Launch, power actions and terminate are
    sent exactly once; the SDK retry strategy is the only layer that may
    repeat them.
    """

    def __init__(self, compute_client: oci.core.ComputeClient):
        """Initialize compute service."""
        self.compute_client = compute_client

    @retry_transient
    def list_images(self, compartment_id: str) -> List[oci.core.models.Image]:
        """List every image visible from a compartment, across all pages."""
        try:
            return list_call_get_all_results(
                self.compute_client.list_images, compartment_id=compartment_id
            ).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to list images in {compartment_id}: {e}")
            raise ProviderError("list images", e) from e

    @retry_transient
    def get_instance(self, instance_id: str) -> oci.core.models.Instance:
        """Fetch the current view of an instance."""
        try:
            return self.compute_client.get_instance(instance_id).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to get instance {instance_id}: {e}")
            raise ProviderError(f"get instance {instance_id}", e) from e

    def launch_instance(
        self, details: oci.core.models.LaunchInstanceDetails
    ) -> oci.core.models.Instance:
        """Launch a new instance."""
        try:
            instance = self.compute_client.launch_instance(details).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to launch instance {details.display_name}: {e}")
            raise ProviderError("launch instance", e) from e

        logger.info(f"Launched instance {instance.id} ({details.display_name})")
        return instance

    def instance_action(self, instance_id: str, action: InstanceAction) -> oci.core.models.Instance:
        """Send a power action to an instance."""
        try:
            instance = self.compute_client.instance_action(
                instance_id=instance_id,
                action=action.value,
            ).data
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to {action.value} instance {instance_id}: {e}")
            raise ProviderError(f"{action.value} instance {instance_id}", e) from e

        logger.info(f"Sent {action.value} to instance {instance_id}")
        return instance

    def terminate_instance(self, instance_id: str) -> None:
        """Terminate an instance and its boot volume."""
        try:
            self.compute_client.terminate_instance(
                instance_id,
                preserve_boot_volume=False,
            )
        except _REQUEST_ERRORS as e:
            logger.error(f"Failed to terminate instance {instance_id}: {e}")
            raise ProviderError(f"terminate instance {instance_id}", e) from e

        logger.info(f"Terminating instance {instance_id}")
