"""Data models for the OCI machine driver."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthType(str, Enum):
    """Authentication types supported."""
    SESSION_TOKEN = "session_token"
    API_KEY = "api_key"


class InstanceLifecycleState(str, Enum):
    """Lifecycle states reported by OCI for a compute instance."""
    MOVING = "MOVING"
    PROVISIONING = "PROVISIONING"
    RUNNING = "RUNNING"
    STARTING = "STARTING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    CREATING_IMAGE = "CREATING_IMAGE"
    TERMINATING = "TERMINATING"
    TERMINATED = "TERMINATED"


class MachineState(str, Enum):
    """Host-visible machine states."""
    STARTING = "Starting"
    RUNNING = "Running"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"


class InstanceAction(str, Enum):
    """Power actions accepted by ComputeClient.instance_action."""
    START = "START"
    STOP = "STOP"
    SOFTRESET = "SOFTRESET"


@dataclass
class MachineInstance:
    """The single compute instance owned by a driver."""
    display_name: str
    shape: Optional[str] = None
    availability_domain: Optional[str] = None
    fault_domain: Optional[str] = None
    compartment_id: Optional[str] = None
    instance_id: Optional[str] = None
    public_ip: str = ""
    ssh_user: str = "opc"
    ssh_port: int = 22
    docker_port: int = 2376
    ssh_key_path: Optional[str] = None

    @property
    def is_created(self) -> bool:
        return bool(self.instance_id)


class OCIConfig(BaseModel):
    """OCI configuration model with validation."""
    model_config = ConfigDict(validate_assignment=True)

    region: Optional[str] = None
    profile_name: str = "DEFAULT"
    config_file: Optional[str] = None
    tenancy: Optional[str] = None
    user: Optional[str] = None
    fingerprint: Optional[str] = None
    key_file: Optional[str] = None
    security_token_file: Optional[str] = None
    pass_phrase: Optional[str] = None
    auth_type: AuthType = AuthType.API_KEY


class DriverOptions(BaseModel):
    """Option values as supplied by the host, before any name is resolved."""
    model_config = ConfigDict(frozen=True)

    image: str
    subnet: str
    availability_domain: str
    compartment: str
    shape: str
    fault_domain: str
    network: Optional[str] = None
    display_name: Optional[str] = None
    ssh_user: str = "opc"
    ssh_port: int = Field(default=22, gt=0, lt=65536)
    docker_port: int = Field(default=2376, gt=0, lt=65536)
    region: Optional[str] = None
    profile: str = "DEFAULT"
    config_file: Optional[str] = None


class MachineConfig(BaseModel):
    """Fully resolved launch configuration. Ids only, no names."""
    model_config = ConfigDict(frozen=True)

    compartment_id: str
    image_id: str
    subnet_id: str
    shape: str
    availability_domain: str
    fault_domain: str


class MachineRecord(BaseModel):
    """Everything the store keeps between invocations for one machine."""
    name: str
    options: DriverOptions
    instance_id: Optional[str] = None
    public_ip: str = ""
    compartment_id: Optional[str] = None
    ssh_key_path: Optional[str] = None
    config: Optional[MachineConfig] = None
