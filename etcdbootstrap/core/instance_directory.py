import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class Instance:
    """An instance which is eligible to be part of the etcd cluster.

    The name is the unique name to identify this instance in the etcd cluster.
    The endpoint is the hostname or IP address peers and clients reach the
    instance on. The peer and client URLs are derived from it.
    """

    __slots__ = ("name", "endpoint")

    def __init__(self, name: str, endpoint: str) -> None:
        self.name = name
        self.endpoint = endpoint

    def __eq__(self, other):
        if not isinstance(other, Instance):
            return NotImplemented
        return self.name == other.name and self.endpoint == other.endpoint

    def __hash__(self):
        return hash((self.name, self.endpoint))

    def __repr__(self):
        return "Instance(name={!r}, endpoint={!r})".format(
            self.name, self.endpoint)


class InstanceDirectory:
    """Interface for discovering the instances of an etcd cluster.

    **Important**: This is an INTERNAL API that is only exposed for the purpose
    of implementing custom instance directories. An implementation answers
    two questions: which instances currently exist and which one is the
    local host. The results are expected to stay the same during one run.
    """

    def __init__(self, provider_config: Dict[str, Any]) -> None:
        self.provider_config = provider_config

    def list_instances(self) -> List[Instance]:
        """Return all the non-terminated instances that will be part of the etcd cluster.

        Raises InstanceDirectoryError if the instances cannot be enumerated.
        """
        raise NotImplementedError

    def get_local_instance(self) -> Instance:
        """Return the instance this process is running on."""
        raise NotImplementedError
