"""Projection of OCI instance lifecycle states onto machine states."""

import logging
from typing import Dict, Union

from .models import InstanceLifecycleState, MachineState

logger = logging.getLogger(__name__)

LIFECYCLE_STATE_MAP: Dict[str, MachineState] = {
    InstanceLifecycleState.PROVISIONING.value: MachineState.STARTING,
    InstanceLifecycleState.STARTING.value: MachineState.STARTING,
    InstanceLifecycleState.CREATING_IMAGE.value: MachineState.STARTING,
    InstanceLifecycleState.RUNNING.value: MachineState.RUNNING,
    InstanceLifecycleState.STOPPING.value: MachineState.STOPPING,
    InstanceLifecycleState.TERMINATING.value: MachineState.STOPPING,
    InstanceLifecycleState.STOPPED.value: MachineState.STOPPED,
    InstanceLifecycleState.TERMINATED.value: MachineState.STOPPED,
}


def reduce_lifecycle_state(
    lifecycle_state: Union[str, InstanceLifecycleState, None]
) -> MachineState:
    """Map an OCI lifecycle state to a machine state.

    Values missing from the table (new OCI states, ``MOVING``, the SDK's
    ``UNKNOWN_ENUM_VALUE``) map to ``MachineState.UNKNOWN`` with a warning.
    """
    if isinstance(lifecycle_state, InstanceLifecycleState):
        lifecycle_state = lifecycle_state.value

    machine_state = LIFECYCLE_STATE_MAP.get(lifecycle_state or "")
    if machine_state is None:
        logger.warning(
            "OCI lifecycle state %r does not map to a machine state", lifecycle_state
        )
        return MachineState.UNKNOWN
    return machine_state
