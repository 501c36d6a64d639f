from typing import Any, Dict, List

from etcdbootstrap.core.instance_directory import Instance


class RegistrationProvider:
    """Interface for publishing the bootstrapped cluster to an external directory,
    such as DNS records or load balancer pools.
    """

    def __init__(self, provider_config: Dict[str, Any]) -> None:
        self.provider_config = provider_config

    def update(self, instances: List[Instance]) -> None:
        """Update the external directory with the discovered instances.

        Raises RegistrationError if the update fails.
        """
        raise NotImplementedError
