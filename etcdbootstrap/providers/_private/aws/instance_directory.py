import logging
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from etcdbootstrap.core.instance_directory import Instance, InstanceDirectory
from etcdbootstrap.core._private.utils import InstanceDirectoryError
from etcdbootstrap.providers._private.aws.utils import _make_client, \
    get_instance_identity_document

logger = logging.getLogger(__name__)

NON_TERMINATED_STATES = [
    "pending", "running", "shutting-down", "stopped", "stopping"]


class AWSInstanceDirectory(InstanceDirectory):
    """The instances of the auto scaling group the local instance belongs to."""

    def __init__(self, provider_config: Dict[str, Any]) -> None:
        InstanceDirectory.__init__(self, provider_config)
        self._identity_document = None
        self._instances = None

    def _get_identity_document(self) -> Dict[str, Any]:
        if self._identity_document is None:
            self._identity_document = get_instance_identity_document()
        return self._identity_document

    def _get_region(self) -> str:
        return self.provider_config.get("region") or \
            self._get_identity_document()["region"]

    def get_local_instance(self) -> Instance:
        identity_document = self._get_identity_document()
        return Instance(
            name=identity_document["instanceId"],
            endpoint=identity_document["privateIp"])

    def list_instances(self) -> List[Instance]:
        if self._instances is None:
            instance_id = self._get_identity_document()["instanceId"]
            region = self._get_region()
            autoscaling = _make_client(
                "autoscaling", self.provider_config, region)
            ec2 = _make_client("ec2", self.provider_config, region)
            try:
                asg_name = _get_asg_name(autoscaling, instance_id)
                instance_ids = _get_asg_instance_ids(autoscaling, asg_name)
                self._instances = _describe_instances(ec2, instance_ids)
            except (BotoCoreError, ClientError) as e:
                raise InstanceDirectoryError(
                    "Unable to query ASG: {}".format(e)) from e
            logger.info("Found {} instances in the auto scaling group {}.".format(
                len(self._instances), asg_name))
        return self._instances


def _get_asg_name(autoscaling, instance_id):
    response = autoscaling.describe_auto_scaling_instances(
        InstanceIds=[instance_id])
    asg_instances = response["AutoScalingInstances"]
    if len(asg_instances) != 1:
        raise InstanceDirectoryError(
            "This instance doesn't appear to be part of an auto scaling group.")
    return asg_instances[0]["AutoScalingGroupName"]


def _get_asg_instance_ids(autoscaling, asg_name):
    response = autoscaling.describe_auto_scaling_groups(
        AutoScalingGroupNames=[asg_name])
    groups = response["AutoScalingGroups"]
    if len(groups) != 1:
        raise InstanceDirectoryError(
            "Expected a single auto scaling group for {}, but found {}.".format(
                asg_name, len(groups)))
    return [instance["InstanceId"] for instance in groups[0]["Instances"]]


def _describe_instances(ec2, instance_ids):
    response = ec2.describe_instances(
        InstanceIds=instance_ids,
        Filters=[{
            "Name": "instance-state-name",
            "Values": NON_TERMINATED_STATES
        }])
    instances = []
    for reservation in response["Reservations"]:
        for instance in reservation["Instances"]:
            instances.append(Instance(
                name=instance["InstanceId"],
                endpoint=instance["PrivateIpAddress"]))
    return instances
