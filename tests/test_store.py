"""Tests for the on-disk machine store."""

import pytest

from src.oci_machine.errors import ConfigurationError
from src.oci_machine.models import MachineRecord
from src.oci_machine.store import MachineStore


@pytest.fixture
def store(tmp_path):
    return MachineStore(tmp_path)


@pytest.fixture
def record(driver_options, machine_config):
    return MachineRecord(
        name="test-machine",
        options=driver_options,
        instance_id="ocid1.instance.oc1..test",
        public_ip="203.0.113.5",
        compartment_id="ocid1.compartment.oc1..comp",
        config=machine_config,
    )


class TestMachineStore:
    def test_save_and_load(self, store, record, tmp_path):
        path = store.save(record)

        assert path == tmp_path / "machines" / "test-machine" / "config.json"
        assert store.exists("test-machine")
        assert store.load("test-machine") == record

    def test_load_missing(self, store):
        with pytest.raises(ConfigurationError, match="does not exist"):
            store.load("missing")

    def test_load_corrupt(self, store, tmp_path):
        machine_dir = tmp_path / "machines" / "broken"
        machine_dir.mkdir(parents=True)
        (machine_dir / "config.json").write_text('{"name": "broken"}')

        with pytest.raises(ConfigurationError, match="Corrupt"):
            store.load("broken")

    def test_remove(self, store, record, tmp_path):
        store.save(record)
        (store.machine_dir("test-machine") / "id_rsa").write_text("key")

        store.remove("test-machine")

        assert not store.exists("test-machine")
        assert not (tmp_path / "machines" / "test-machine").exists()

    def test_list_names(self, store, record):
        assert store.list_names() == []

        store.save(record)
        store.save(record.model_copy(update={"name": "another"}))

        assert store.list_names() == ["another", "test-machine"]

    def test_remove_failure_is_a_configuration_error(self, store, record):
        store.save(record)
        (store.machine_dir("test-machine") / "keys").mkdir()

        with pytest.raises(ConfigurationError, match="Failed to remove machine test-machine"):
            store.remove("test-machine")
