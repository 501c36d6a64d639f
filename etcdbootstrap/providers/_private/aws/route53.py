import logging
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.core.registration_provider import RegistrationProvider
from etcdbootstrap.core._private.utils import RegistrationError
from etcdbootstrap.providers._private.aws.utils import _make_client, \
    get_boto_error_code, get_instance_identity_document

logger = logging.getLogger(__name__)

ROUTE53_RECORD_TTL = 60


class Route53RegistrationProvider(RegistrationProvider):
    """Publish the instances as an A record of a Route53 hosted zone.

    With record_per_member, each instance also gets its own record
    named <hostname>-<index>.
    """

    def __init__(self, provider_config: Dict[str, Any]) -> None:
        RegistrationProvider.__init__(self, provider_config)
        self.zone_id = provider_config["zone_id"]
        self.hostname = provider_config["hostname"]
        self.record_per_member = provider_config.get("record_per_member", False)
        region = provider_config.get("region") or \
            get_instance_identity_document()["region"]
        self.route53 = _make_client("route53", provider_config, region)

    def update(self, instances: List[Instance]) -> None:
        try:
            zone = self.route53.get_hosted_zone(Id=self.zone_id)["HostedZone"]
        except (BotoCoreError, ClientError) as e:
            raise RegistrationError(
                "Unable to retrieve hosted zone {}, are you sure it "
                "exists? {}".format(self.zone_id, e)) from e

        zone_name = zone["Name"]
        if self.record_per_member:
            for index, instance in enumerate(instances):
                self._upsert_a_record(
                    zone, "{}-{}.{}".format(self.hostname, index, zone_name),
                    [instance.endpoint])

        self._upsert_a_record(
            zone, "{}.{}".format(self.hostname, zone_name),
            [instance.endpoint for instance in instances])

    def _upsert_a_record(self, zone, fqdn, endpoints):
        change = {
            "Action": "UPSERT",
            "ResourceRecordSet": {
                "Name": fqdn,
                "Type": "A",
                "TTL": ROUTE53_RECORD_TTL,
                "ResourceRecords": [
                    {"Value": endpoint} for endpoint in endpoints],
            }
        }
        try:
            self.route53.change_resource_record_sets(
                HostedZoneId=zone["Id"],
                ChangeBatch={"Changes": [change]})
        except (BotoCoreError, ClientError) as e:
            raise RegistrationError(
                "Unable to change resource record set {} ({}): {}".format(
                    fqdn, get_boto_error_code(e), e)) from e
        logger.info("Successfully set {} to {}".format(fqdn, endpoints))
