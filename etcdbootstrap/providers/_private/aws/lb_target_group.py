import logging
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.core.registration_provider import RegistrationProvider
from etcdbootstrap.core._private.utils import RegistrationError
from etcdbootstrap.providers._private.aws.utils import _make_client, \
    get_instance_identity_document

logger = logging.getLogger(__name__)


class LBTargetGroupRegistrationProvider(RegistrationProvider):
    """Keep the targets of an ELBv2 target group in line with the instances.

    The target group must use the ip target type, the instance endpoints
    are registered as the target ids.
    """

    def __init__(self, provider_config: Dict[str, Any]) -> None:
        RegistrationProvider.__init__(self, provider_config)
        self.target_group_name = provider_config["target_group_name"]
        region = provider_config.get("region") or \
            get_instance_identity_document()["region"]
        self.elb = _make_client("elbv2", provider_config, region)

    def update(self, instances: List[Instance]) -> None:
        try:
            self._update(instances)
        except (BotoCoreError, ClientError) as e:
            raise RegistrationError(
                "Unable to update the target group {}: {}".format(
                    self.target_group_name, e)) from e

    def _update(self, instances):
        target_group_arn = self._get_target_group_arn()
        endpoints = [instance.endpoint for instance in instances]

        self.elb.register_targets(
            TargetGroupArn=target_group_arn,
            Targets=[{"Id": endpoint} for endpoint in endpoints])
        logger.info("Registered {} with the target group {}.".format(
            endpoints, self.target_group_name))

        response = self.elb.describe_target_health(
            TargetGroupArn=target_group_arn)
        targets_to_remove = [
            target_health["Target"]
            for target_health in response["TargetHealthDescriptions"]
            if target_health["Target"]["Id"] not in endpoints]
        if targets_to_remove:
            self.elb.deregister_targets(
                TargetGroupArn=target_group_arn, Targets=targets_to_remove)
            logger.info("Deregistered {} from the target group {}.".format(
                [target["Id"] for target in targets_to_remove],
                self.target_group_name))

    def _get_target_group_arn(self):
        response = self.elb.describe_target_groups(
            Names=[self.target_group_name])
        target_groups = response["TargetGroups"]
        if len(target_groups) != 1:
            raise RegistrationError(
                "Unexpected number of target groups found: expected: 1, "
                "received: {}".format(len(target_groups)))
        return target_groups[0]["TargetGroupArn"]
