"""Docker-machine style driver for a single OCI compute instance."""

from .driver import Driver
from .models import MachineState

__version__ = "0.1.0"

__all__ = ["Driver", "MachineState", "__version__"]
