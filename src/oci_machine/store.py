"""
On-disk machine store. One JSON document per machine.
"""

import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from .errors import ConfigurationError
from .models import MachineRecord

logger = logging.getLogger(__name__)

RECORD_FILE = "config.json"


class MachineStore:
    """Persist machine records under ``<store_path>/machines/<name>/``."""

    def __init__(self, store_path: Path):
        self.store_path = Path(store_path).expanduser()

    def machine_dir(self, name: str) -> Path:
        return self.store_path / "machines" / name

    def exists(self, name: str) -> bool:
        return (self.machine_dir(name) / RECORD_FILE).exists()

    def save(self, record: MachineRecord) -> Path:
        machine_dir = self.machine_dir(record.name)
        machine_dir.mkdir(parents=True, exist_ok=True)
        path = machine_dir / RECORD_FILE
        path.write_text(record.model_dump_json(indent=2))
        logger.debug(f"Saved machine {record.name} to {path}")
        return path

    def load(self, name: str) -> MachineRecord:
        path = self.machine_dir(name) / RECORD_FILE
        if not path.exists():
            raise ConfigurationError(f"Machine {name} does not exist in {self.store_path}")
        try:
            return MachineRecord.model_validate_json(path.read_text())
        except ValidationError as e:
            raise ConfigurationError(f"Corrupt machine record {path}: {e}") from e

    def remove(self, name: str) -> None:
        machine_dir = self.machine_dir(name)
        try:
            for path in sorted(machine_dir.glob("*"), reverse=True):
                if path.is_file():
                    path.unlink()
            if machine_dir.exists():
                machine_dir.rmdir()
        except OSError as e:
            raise ConfigurationError(f"Failed to remove machine {name} from {machine_dir}: {e}") from e
        logger.debug(f"Removed machine {name} from {self.store_path}")

    def list_names(self) -> List[str]:
        machines = self.store_path / "machines"
        if not machines.exists():
            return []
        return sorted(path.parent.name for path in machines.glob(f"*/{RECORD_FILE}"))
