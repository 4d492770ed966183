"""Shared fixtures for driver tests."""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from src.oci_machine.models import DriverOptions, MachineConfig, MachineInstance


def page(items, next_page=None):
    """Fake OCI list response page."""
    return SimpleNamespace(
        status=200,
        headers={},
        request=None,
        data=items,
        has_next_page=next_page is not None,
        next_page=next_page,
    )


def sdk_client(*list_operations):
    """Mock SDK client whose list operations can be paged by oci.pagination."""
    client = Mock()
    for operation in list_operations:
        getattr(client, operation).__name__ = operation
    return client


def oci_instance(lifecycle_state, instance_id="ocid1.instance.oc1..test"):
    """Fake OCI Instance model."""
    return SimpleNamespace(id=instance_id, lifecycle_state=lifecycle_state)


def no_sleep(seconds):
    """Sleep replacement for polling tests."""


@pytest.fixture
def driver_options():
    return DriverOptions(
        image="Oracle-Linux-7.9",
        network="test-vcn",
        subnet="Public Subnet",
        availability_domain="eXkP:PHX-AD-1",
        fault_domain="FAULT-DOMAIN-1",
        shape="VM.Standard2.1",
        compartment="test-compartment",
    )


@pytest.fixture
def machine_config():
    return MachineConfig(
        compartment_id="ocid1.compartment.oc1..comp",
        image_id="ocid1.image.oc1..image",
        subnet_id="ocid1.subnet.oc1..subnet",
        shape="VM.Standard2.1",
        availability_domain="eXkP:PHX-AD-1",
        fault_domain="FAULT-DOMAIN-1",
    )


@pytest.fixture
def created_instance():
    return MachineInstance(
        display_name="test-machine",
        instance_id="ocid1.instance.oc1..test",
        compartment_id="ocid1.compartment.oc1..comp",
    )


@pytest.fixture
def mock_compute():
    return Mock()


@pytest.fixture
def mock_network():
    return Mock()
