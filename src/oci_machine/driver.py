"""Host-facing driver for one OCI compute instance."""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from .client import OCIClient
from .config import CREATE_FLAGS, Flag
from .controller import InstanceController
from .errors import DRIVER_NAME, AddressUnresolvedError, InvalidStateError
from .models import DriverOptions, MachineConfig, MachineInstance, MachineRecord, MachineState
from .polling import PollSchedule
from .resolver import IdentifierResolver
from .ssh import SSHCommandRunner, docker_port_firewall_commands, ensure_ssh_key
from .store import MachineStore

logger = logging.getLogger(__name__)

SSH_KEY_FILE = "id_rsa"


class Driver:
    """Create/start/stop/restart/kill/remove/inspect contract for one machine.

    OCI has no hard power-off and no delete-without-terminate primitive, so
    ``kill`` is ``stop`` and ``remove`` is ``terminate``.
    """

    def __init__(
        self,
        machine_name: str,
        store_path: Path,
        options: DriverOptions,
        client: Optional[OCIClient] = None,
        schedule: Optional[PollSchedule] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.machine_name = machine_name
        self.store = MachineStore(store_path)
        self.options = options
        self.config: Optional[MachineConfig] = None
        self.instance = MachineInstance(
            display_name=options.display_name or machine_name,
            shape=options.shape,
            availability_domain=options.availability_domain,
            fault_domain=options.fault_domain,
            ssh_user=options.ssh_user,
            ssh_port=options.ssh_port,
            docker_port=options.docker_port,
            ssh_key_path=str(self.store.machine_dir(machine_name) / SSH_KEY_FILE),
        )
        self.schedule = schedule
        self.sleep = sleep
        self._client = client
        self._controller: Optional[InstanceController] = None

    @classmethod
    def from_store(cls, machine_name: str, store_path: Path, **kwargs) -> "Driver":
        """Rebuild a driver from its persisted record."""
        record = MachineStore(store_path).load(machine_name)
        driver = cls(machine_name, store_path, record.options, **kwargs)
        driver.config = record.config
        driver.instance.instance_id = record.instance_id
        driver.instance.public_ip = record.public_ip
        driver.instance.compartment_id = record.compartment_id
        if record.ssh_key_path:
            driver.instance.ssh_key_path = record.ssh_key_path
        return driver

    def save(self) -> Path:
        record = MachineRecord(
            name=self.machine_name,
            options=self.options,
            instance_id=self.instance.instance_id,
            public_ip=self.instance.public_ip,
            compartment_id=self.instance.compartment_id,
            ssh_key_path=self.instance.ssh_key_path,
            config=self.config,
        )
        return self.store.save(record)

    @property
    def client(self) -> OCIClient:
        if self._client is None:
            self._client = OCIClient(
                region=self.options.region,
                profile_name=self.options.profile,
                config_file=self.options.config_file,
            )
        return self._client

    @property
    def controller(self) -> InstanceController:
        if self._controller is None:
            self._controller = InstanceController(
                self.client.compute_service(),
                self.client.network_service(),
                schedule=self.schedule,
                sleep=self.sleep,
            )
        return self._controller

    def driver_name(self) -> str:
        return DRIVER_NAME

    @staticmethod
    def get_create_flags() -> List[Flag]:
        return list(CREATE_FLAGS)

    def pre_create_check(self) -> MachineConfig:
        """Resolve every configured name before anything is launched."""
        if self.instance.is_created:
            raise InvalidStateError(
                f"Machine {self.machine_name} already has instance {self.instance.instance_id}"
            )

        resolver = IdentifierResolver(
            self.client.identity_service(),
            self.client.compute_service(),
            self.client.network_service(),
        )
        self.config = resolver.resolve_configuration(self.options, self.client.tenancy_id)
        logger.info("Completed machine pre-create checks.")
        return self.config

    def create(self) -> None:
        if self.config is None:
            self.pre_create_check()

        public_key = ensure_ssh_key(Path(self.instance.ssh_key_path))
        logger.info(f"Launching OCI instance {self.instance.display_name}")
        try:
            self.controller.create(self.instance, self.config, ssh_public_key=public_key)
        finally:
            if self.instance.is_created:
                self.save()

    def start(self) -> None:
        self.controller.start(self.instance)
        if not self.instance.public_ip:
            self.controller.refresh_address(self.instance)
        self.save()

    def stop(self) -> None:
        self.controller.stop(self.instance)

    def restart(self) -> None:
        self.controller.restart(self.instance)

    def kill(self) -> None:
        logger.debug("OCI does not implement kill. Calling stop instead.")
        self.stop()

    def terminate(self) -> None:
        self.controller.terminate(self.instance)

    def remove(self) -> None:
        logger.debug("OCI does not implement remove. Calling terminate instead.")
        self.terminate()

    def get_state(self) -> MachineState:
        return self.controller.get_state(self.instance)

    def get_ip(self) -> str:
        """Public IP of the instance, or an empty string while not yet available."""
        if not self.instance.is_created:
            raise InvalidStateError(f"Machine {self.machine_name} has not been created")
        if not self.instance.public_ip:
            if self.controller.refresh_address(self.instance):
                self.save()
        logger.debug(f"OCI machine IP address resolved to: {self.instance.public_ip}")
        return self.instance.public_ip

    def get_ssh_hostname(self) -> str:
        return self.get_ip()

    def get_ssh_username(self) -> str:
        return self.instance.ssh_user

    def get_ssh_port(self) -> int:
        return self.instance.ssh_port

    def get_ssh_key_path(self) -> str:
        return self.instance.ssh_key_path

    def get_url(self) -> str:
        """Docker engine URL, ``tcp://<ip>:<port>``. The machine must be running."""
        state = self.get_state()
        if state != MachineState.RUNNING:
            raise InvalidStateError(f"Machine {self.machine_name} is not running (state: {state.value})")

        ip = self.get_ip()
        if not ip:
            raise AddressUnresolvedError(f"Machine {self.machine_name} has no public IP yet")

        host = f"[{ip}]" if ":" in ip else ip
        url = f"tcp://{host}:{self.instance.docker_port}"
        logger.debug(f"Machine URL is resolved to: {url}")
        return url

    def ssh_runner(self) -> SSHCommandRunner:
        hostname = self.get_ssh_hostname()
        if not hostname:
            raise AddressUnresolvedError(f"Machine {self.machine_name} has no public IP yet")
        return SSHCommandRunner(
            hostname=hostname,
            username=self.get_ssh_username(),
            key_path=self.get_ssh_key_path(),
            port=self.get_ssh_port(),
        )

    def configure_firewall(self, runner: Optional[SSHCommandRunner] = None) -> str:
        """Open the Docker port in the instance's firewalld configuration."""
        runner = runner or self.ssh_runner()
        logger.info(f"Opening port {self.instance.docker_port}/tcp on {runner.hostname}")
        return runner.run_all(docker_port_firewall_commands(self.instance.docker_port))
