"""Lifecycle control for a single OCI compute instance."""

import logging
import time
from typing import Callable, Optional

from .errors import AddressUnresolvedError, InvalidStateError, ProviderError
from .lifecycle import reduce_lifecycle_state
from .models import (
    InstanceAction,
    InstanceLifecycleState,
    MachineConfig,
    MachineInstance,
    MachineState,
)
from .polling import PollSchedule, lifecycle_policy
from .services import ComputeService, NetworkService
from .services.compute import build_launch_details

logger = logging.getLogger(__name__)

NOT_FOUND = 404


class InstanceController:
    """Issue lifecycle requests and wait for OCI to converge.

    Every operation takes the owned MachineInstance and mutates only its
    instance id (on create) and public IP (on address resolution). Mutating
    requests are sent once; only the status read is repeated while polling.
    """

    def __init__(
        self,
        compute: ComputeService,
        network: NetworkService,
        schedule: Optional[PollSchedule] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.compute = compute
        self.network = network
        self.schedule = schedule or PollSchedule()
        self.sleep = sleep

    def create(
        self,
        instance: MachineInstance,
        config: MachineConfig,
        ssh_public_key: Optional[str] = None,
    ) -> None:
        """Launch the instance and wait until it is RUNNING."""
        if instance.is_created:
            raise InvalidStateError(f"Instance {instance.instance_id} already exists")

        details = build_launch_details(config, instance.display_name, ssh_public_key)
        launched = self.compute.launch_instance(details)

        # Recorded before polling so a timed-out create can still be removed.
        instance.instance_id = launched.id
        instance.compartment_id = config.compartment_id
        instance.shape = config.shape
        instance.availability_domain = config.availability_domain
        instance.fault_domain = config.fault_domain

        self._wait_for(instance, InstanceLifecycleState.RUNNING)
        self.refresh_address(instance)

    def start(self, instance: MachineInstance) -> None:
        current = self._lifecycle_state(instance)
        if reduce_lifecycle_state(current) == MachineState.RUNNING:
            logger.info(f"Instance {instance.instance_id} is already running")
            return

        self.compute.instance_action(instance.instance_id, InstanceAction.START)
        self._wait_for(instance, InstanceLifecycleState.RUNNING)

    def stop(self, instance: MachineInstance) -> None:
        current = self._lifecycle_state(instance)
        if current == InstanceLifecycleState.STOPPED.value:
            logger.info(f"Instance {instance.instance_id} is already stopped")
            return

        self.compute.instance_action(instance.instance_id, InstanceAction.STOP)
        self._wait_for(instance, InstanceLifecycleState.STOPPED)

    def restart(self, instance: MachineInstance) -> None:
        """Soft reset; does not wait for the instance to come back."""
        self._require_created(instance)
        self.compute.instance_action(instance.instance_id, InstanceAction.SOFTRESET)

    def terminate(self, instance: MachineInstance) -> None:
        """Terminate and wait for TERMINATED.

        OCI eventually purges terminated instances, after which reads return
        404. A 404 is treated as already terminated.
        """
        try:
            current = self._lifecycle_state(instance)
        except ProviderError as e:
            if e.status != NOT_FOUND:
                raise
            logger.info(f"Instance {instance.instance_id} no longer exists")
            return

        if current == InstanceLifecycleState.TERMINATED.value:
            logger.info(f"Instance {instance.instance_id} is already terminated")
            return

        self.compute.terminate_instance(instance.instance_id)
        try:
            self._wait_for(instance, InstanceLifecycleState.TERMINATED)
        except ProviderError as e:
            if e.status != NOT_FOUND:
                raise
            logger.info(f"Instance {instance.instance_id} was purged while terminating")

    def get_state(self, instance: MachineInstance) -> MachineState:
        """Single status read; never waits."""
        lifecycle_state = self._lifecycle_state(instance)
        machine_state = reduce_lifecycle_state(lifecycle_state)
        logger.debug(
            "Determined OCI lifecycle state=%s, machine state=%s",
            lifecycle_state,
            machine_state.value,
        )
        return machine_state

    def refresh_address(self, instance: MachineInstance) -> str:
        """Resolve the public IP, leaving it empty when not yet available."""
        self._require_created(instance)
        try:
            instance.public_ip = self.network.resolve_public_address(
                instance.compartment_id, instance.instance_id
            )
        except AddressUnresolvedError as e:
            logger.warning(f"Public IP not yet available: {e}")
            instance.public_ip = ""
        return instance.public_ip

    def _wait_for(self, instance: MachineInstance, target: InstanceLifecycleState) -> None:
        instance_id = instance.instance_id
        logger.info(f"Waiting for instance {instance_id} to reach {target.value}")
        policy = lifecycle_policy(target, self.schedule)
        policy.wait(lambda: self.compute.get_instance(instance_id), sleep=self.sleep)
        logger.info(f"Instance {instance_id} reached {target.value}")

    def _lifecycle_state(self, instance: MachineInstance) -> Optional[str]:
        self._require_created(instance)
        return self.compute.get_instance(instance.instance_id).lifecycle_state

    @staticmethod
    def _require_created(instance: MachineInstance) -> None:
        if not instance.is_created:
            raise InvalidStateError(f"Machine {instance.display_name} has not been created")
