import logging
from typing import Any, Dict, List

import requests
from google.auth.exceptions import GoogleAuthError
from googleapiclient import errors

from etcdbootstrap.core.instance_directory import Instance, InstanceDirectory
from etcdbootstrap.core._private.utils import InstanceDirectoryError
from etcdbootstrap.providers._private.gcp.utils import \
    construct_compute_client, get_metadata

logger = logging.getLogger(__name__)


def get_instance_filter(environment, role):
    # https://cloud.google.com/sdk/gcloud/reference/topic/filters
    filters = [
        "labels.environment={}".format(environment),
        "labels.role={}".format(role),
        "status != TERMINATED",
    ]
    return " AND ".join(filters)


def _list_all(collection, **kwargs):
    request = collection.list(**kwargs)
    while request is not None:
        response = request.execute()
        for item in response.get("items", []):
            yield item
        request = collection.list_next(request, response)


class GCPInstanceDirectory(InstanceDirectory):
    """The instances of a project carrying the environment and role labels.

    All the zones of the project are searched. The local instance is read
    from the metadata server.
    """

    def __init__(self, provider_config: Dict[str, Any], compute=None) -> None:
        InstanceDirectory.__init__(self, provider_config)
        self.project_id = provider_config["project_id"]
        self.environment = provider_config["environment"]
        self.role = provider_config["role"]
        if compute is None:
            try:
                compute = construct_compute_client()
            except GoogleAuthError as e:
                raise InstanceDirectoryError(
                    "Unable to load the GCP credentials: {}".format(e)) from e
        self.compute = compute
        self._instances = None
        self._local_instance = None

    def list_instances(self) -> List[Instance]:
        if self._instances is None:
            self._instances = self._find_all_instances()
        return self._instances

    def get_local_instance(self) -> Instance:
        if self._local_instance is None:
            try:
                name = get_metadata("instance/name")
                ip = get_metadata("instance/network-interfaces/0/ip")
            except requests.exceptions.RequestException as e:
                raise InstanceDirectoryError(
                    "Unable to retrieve the local instance metadata: "
                    "{}".format(e)) from e
            self._local_instance = Instance(name=name, endpoint=ip)
        return self._local_instance

    def _find_all_instances(self):
        try:
            zones = [zone["name"] for zone in _list_all(
                self.compute.zones(), project=self.project_id)]
        except errors.HttpError as e:
            raise InstanceDirectoryError(
                "Unable to list zones for project {}: {}".format(
                    self.project_id, e)) from e

        instance_filter = get_instance_filter(self.environment, self.role)
        instances = []
        for zone in zones:
            try:
                items = list(_list_all(
                    self.compute.instances(), project=self.project_id,
                    zone=zone, filter=instance_filter))
            except errors.HttpError as e:
                raise InstanceDirectoryError(
                    "Unable to list instances for project {}, zone {}: "
                    "{}".format(self.project_id, zone, e)) from e

            for item in items:
                # Only the first network interface is used. Its networkIP
                # is always a private IP.
                network_interfaces = item.get("networkInterfaces") or []
                if not network_interfaces:
                    raise InstanceDirectoryError(
                        "Unable to find network interfaces for instance "
                        "{}".format(item["name"]))
                instances.append(Instance(
                    name=item["name"],
                    endpoint=network_interfaces[0]["networkIP"]))
        return instances
