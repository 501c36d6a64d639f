from unittest.mock import MagicMock, patch

import pytest

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.core._private.utils import InstanceDirectoryError
from etcdbootstrap.providers._private.gcp.instance_directory import \
    GCPInstanceDirectory, get_instance_filter

_PROJECT_NAME = "project-one"

INSTANCE_FILTER = \
    "labels.environment=prd AND labels.role=etcd AND status != TERMINATED"


def _gcp_instance(name, ip=None):
    instance = {"name": name}
    if ip is not None:
        instance["networkInterfaces"] = [{"networkIP": ip}]
    return instance


def _compute(instances_by_zone):
    compute = MagicMock()
    compute.zones().list().execute.return_value = {
        "items": [{"name": zone} for zone in instances_by_zone]}
    compute.zones().list_next.return_value = None

    def list_instances(project, zone, filter):
        request = MagicMock()
        request.execute.return_value = {"items": instances_by_zone[zone]}
        return request

    compute.instances().list.side_effect = list_instances
    compute.instances().list_next.return_value = None
    return compute


def _gcp_directory(compute):
    return GCPInstanceDirectory({
        "type": "gcp",
        "project_id": _PROJECT_NAME,
        "environment": "prd",
        "role": "etcd",
    }, compute=compute)


def test_instance_filter():
    assert get_instance_filter("prd", "etcd") == INSTANCE_FILTER


def test_list_instances_in_all_zones():
    compute = _compute({
        "europe-west1-b": [_gcp_instance("etcd-0", "10.0.0.1")],
        "europe-west1-c": [
            _gcp_instance("etcd-1", "10.0.0.2"),
            _gcp_instance("etcd-2", "10.0.0.3"),
        ],
        "europe-west1-d": [],
    })

    instances = _gcp_directory(compute).list_instances()

    assert instances == [
        Instance("etcd-0", "10.0.0.1"),
        Instance("etcd-1", "10.0.0.2"),
        Instance("etcd-2", "10.0.0.3"),
    ]
    compute.instances().list.assert_any_call(
        project=_PROJECT_NAME, zone="europe-west1-c", filter=INSTANCE_FILTER)


def test_instance_without_network_interface():
    compute = _compute({"europe-west1-b": [_gcp_instance("etcd-0")]})

    with pytest.raises(InstanceDirectoryError, match="etcd-0"):
        _gcp_directory(compute).list_instances()


def test_local_instance_from_metadata():
    metadata = {
        "instance/name": "etcd-1",
        "instance/network-interfaces/0/ip": "10.0.0.2",
    }
    with patch("etcdbootstrap.providers._private.gcp.instance_directory."
               "get_metadata", side_effect=metadata.get):
        local_instance = _gcp_directory(_compute({})).get_local_instance()

    assert local_instance == Instance("etcd-1", "10.0.0.2")


if __name__ == "__main__":
    import sys

    sys.exit(pytest.main(["-v", __file__]))
