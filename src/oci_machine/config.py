"""
Driver option loading: flag table, environment bindings and YAML files.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError, RequiredOptionError
from .models import DriverOptions

logger = logging.getLogger(__name__)

DEFAULT_SSH_USER = "opc"
DEFAULT_SHAPE = "VM.Standard2.1"
DEFAULT_FAULT_DOMAIN = "FAULT-DOMAIN-1"
DEFAULT_IMAGE_NAME = "Oracle-Linux-7.5-2018.10.16-0"
DEFAULT_DOCKER_PORT = "2376"
DEFAULT_SSH_PORT = "22"


@dataclass(frozen=True)
class Flag:
    """One driver option as exposed to the host."""
    name: str
    field: str
    env_var: str
    usage: str
    default: Optional[str] = None
    required: bool = False


CREATE_FLAGS: List[Flag] = [
    Flag(
        name="oci-image",
        field="image",
        env_var="OCI_IMAGE_NAME",
        usage="The display name of image",
        default=DEFAULT_IMAGE_NAME,
        required=True,
    ),
    Flag(
        name="oci-network",
        field="network",
        env_var="OCI_VCN_NAME",
        usage="The display name of VCN holding the subnet",
    ),
    Flag(
        name="oci-subnet",
        field="subnet",
        env_var="OCI_SUBNET_NAME",
        usage="The display name (or OCID) of subnet",
        required=True,
    ),
    Flag(
        name="oci-availability-domain",
        field="availability_domain",
        env_var="OCI_AVAILABILITY_DOMAIN",
        usage="The availability domain of the instance.",
        required=True,
    ),
    Flag(
        name="oci-fault-domain",
        field="fault_domain",
        env_var="OCI_FAULT_DOMAIN",
        usage="A fault domain is a grouping of hardware and infrastructure within an availability domain.",
        default=DEFAULT_FAULT_DOMAIN,
        required=True,
    ),
    Flag(
        name="oci-shape",
        field="shape",
        env_var="OCI_SHAPE",
        usage="The shape of an instance. The shape determines the number of CPUs, amount of memory, "
        "and other resources allocated to the instance.",
        default=DEFAULT_SHAPE,
        required=True,
    ),
    Flag(
        name="oci-compartment",
        field="compartment",
        env_var="OCI_COMPARTMENT_NAME",
        usage="The display name of compartment",
        required=True,
    ),
    Flag(
        name="oci-display-name",
        field="display_name",
        env_var="OCI_DISPLAY_NAME",
        usage="Display name of the instance (defaults to the machine name)",
    ),
    Flag(
        name="oci-ssh-user",
        field="ssh_user",
        env_var="OCI_SSH_USER",
        usage="SSH user of the image",
        default=DEFAULT_SSH_USER,
    ),
    Flag(
        name="oci-ssh-port",
        field="ssh_port",
        env_var="OCI_SSH_PORT",
        usage="SSH port of the instance",
        default=DEFAULT_SSH_PORT,
    ),
    Flag(
        name="oci-docker-port",
        field="docker_port",
        env_var="OCI_DOCKER_PORT",
        usage="Port the Docker engine listens on",
        default=DEFAULT_DOCKER_PORT,
    ),
    Flag(
        name="oci-region",
        field="region",
        env_var="OCI_REGION",
        usage="OCI region (defaults to the profile's region)",
    ),
    Flag(
        name="oci-profile",
        field="profile",
        env_var="OCI_CLI_PROFILE",
        usage="Profile in the OCI config file",
        default="DEFAULT",
    ),
    Flag(
        name="oci-config-file",
        field="config_file",
        env_var="OCI_CLI_CONFIG_FILE",
        usage="Path to the OCI config file (defaults to ~/.oci/config)",
    ),
]


def load_options_file(path: str) -> Dict[str, str]:
    """
    Read flag values from a YAML file.

    The file is a flat mapping of flag name to value, e.g. ``oci-shape: VM.Standard2.1``.

    Raises:
        ConfigurationError: If the file is missing, malformed or not a mapping
    """
    try:
        with open(Path(path).expanduser(), "r") as file:
            content = yaml.safe_load(file) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Options file not found at path: {path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing options file {path}: {e}")

    if not isinstance(content, dict):
        raise ConfigurationError(f"Options file {path} must contain a mapping of flag names to values")

    known = {flag.name for flag in CREATE_FLAGS}
    unknown = sorted(set(content) - known)
    if unknown:
        raise ConfigurationError(f"Unknown options in {path}: {', '.join(unknown)}")

    return {key: str(value) for key, value in content.items() if value is not None}


def load_driver_options(
    values: Optional[Mapping[str, Optional[str]]] = None,
    environ: Optional[Mapping[str, str]] = None,
    options_file: Optional[str] = None,
) -> DriverOptions:
    """
    Build validated driver options.

    Precedence per flag: explicit value, environment variable, options file,
    then the flag default. An empty result for a required flag raises
    RequiredOptionError.
    """
    values = values or {}
    environ = os.environ if environ is None else environ
    file_values = load_options_file(options_file) if options_file else {}

    resolved: Dict[str, Any] = {}
    for flag in CREATE_FLAGS:
        value = values.get(flag.name) or environ.get(flag.env_var) or file_values.get(flag.name)
        if not value:
            value = flag.default
        if not value:
            if flag.required:
                raise RequiredOptionError(flag.name)
            continue
        resolved[flag.field] = value

    try:
        options = DriverOptions(**resolved)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid driver options: {e}") from e

    logger.debug("Set configuration from flags.")
    return options
