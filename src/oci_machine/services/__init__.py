"""OCI services package."""

from .compute import ComputeService
from .identity import IdentityService
from .network import NetworkService

__all__ = ["ComputeService", "IdentityService", "NetworkService"]
