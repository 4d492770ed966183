"""Resolution of display names in driver options into OCIDs."""

import logging
from typing import Any, Iterable, Optional

from .errors import ResourceNotFoundError
from .models import DriverOptions, MachineConfig
from .services import ComputeService, IdentityService, NetworkService

logger = logging.getLogger(__name__)

SUBNET_OCID_PREFIX = "ocid1.subnet."


def first_exact_match(candidates: Iterable[Any], name: str, attribute: str) -> Optional[Any]:
    """Return the first candidate whose ``attribute`` equals ``name`` exactly."""
    for candidate in candidates:
        if getattr(candidate, attribute, None) == name:
            return candidate
    return None


class IdentifierResolver:
    """Turn compartment, image and subnet names into OCIDs.

    Matching is exact and case-sensitive; the first match wins. Every call
    reads all pages of the listing before giving up with
    ResourceNotFoundError, which signals misconfiguration and is not retried.
    """

    def __init__(
        self,
        identity: IdentityService,
        compute: ComputeService,
        network: NetworkService,
    ):
        self.identity = identity
        self.compute = compute
        self.network = network

    def resolve_compartment(self, tenancy_id: str, name: str) -> str:
        compartment = first_exact_match(self.identity.list_compartments(tenancy_id), name, "name")
        if compartment is None:
            raise ResourceNotFoundError("compartment", name)
        logger.debug("Compartment %r resolved to %s", name, compartment.id)
        return compartment.id

    def resolve_image(self, compartment_id: str, name: str) -> str:
        image = first_exact_match(self.compute.list_images(compartment_id), name, "display_name")
        if image is None:
            raise ResourceNotFoundError("image", name)
        logger.debug("Image %r resolved to %s", name, image.id)
        return image.id

    def resolve_subnet(
        self, compartment_id: str, network_name: Optional[str], subnet_name: str
    ) -> str:
        """Resolve a subnet by name inside the named VCN.

        A subnet value that is already an OCID is returned unchanged.
        """
        if subnet_name.startswith(SUBNET_OCID_PREFIX):
            return subnet_name
        if not network_name:
            raise ResourceNotFoundError("VCN for subnet", subnet_name)

        vcn = first_exact_match(self.network.list_vcns(compartment_id), network_name, "display_name")
        if vcn is None:
            raise ResourceNotFoundError("VCN", network_name)

        subnet = first_exact_match(
            self.network.list_subnets(compartment_id, vcn.id), subnet_name, "display_name"
        )
        if subnet is None:
            raise ResourceNotFoundError("subnet", subnet_name)
        logger.debug("Subnet %r in VCN %r resolved to %s", subnet_name, network_name, subnet.id)
        return subnet.id

    def check_availability_domain(self, compartment_id: str, availability_domain: str) -> None:
        names = self.identity.list_availability_domains(compartment_id)
        if availability_domain not in names:
            raise ResourceNotFoundError("availability domain", availability_domain)

    def resolve_configuration(self, options: DriverOptions, tenancy_id: str) -> MachineConfig:
        """Resolve every name in ``options``; nothing is returned unless all resolve."""
        compartment_id = self.resolve_compartment(tenancy_id, options.compartment)
        self.check_availability_domain(compartment_id, options.availability_domain)
        image_id = self.resolve_image(compartment_id, options.image)
        subnet_id = self.resolve_subnet(compartment_id, options.network, options.subnet)

        config = MachineConfig(
            compartment_id=compartment_id,
            image_id=image_id,
            subnet_id=subnet_id,
            shape=options.shape,
            availability_domain=options.availability_domain,
            fault_domain=options.fault_domain,
        )
        logger.info(
            "Resolved configuration: compartment=%s image=%s subnet=%s",
            compartment_id,
            image_id,
            subnet_id,
        )
        return config
