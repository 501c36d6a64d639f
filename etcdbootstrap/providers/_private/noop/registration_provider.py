import logging
from typing import List

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.core.registration_provider import RegistrationProvider

logger = logging.getLogger(__name__)


class NoopRegistrationProvider(RegistrationProvider):
    def update(self, instances: List[Instance]) -> None:
        logger.info("No registration provider configured, skipping the "
                    "registration of {} instances.".format(len(instances)))
