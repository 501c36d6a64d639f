import logging
from typing import Any, Dict, List

from google.auth.exceptions import GoogleAuthError
from googleapiclient import errors

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.core.registration_provider import RegistrationProvider
from etcdbootstrap.core._private.utils import RegistrationError
from etcdbootstrap.providers._private.gcp.utils import construct_dns_client

logger = logging.getLogger(__name__)

CLOUD_DNS_RECORD_TTL = 300


class CloudDNSRegistrationProvider(RegistrationProvider):
    """Publish the instances as an A record of a Cloud DNS managed zone."""

    def __init__(self, provider_config: Dict[str, Any], dns=None) -> None:
        RegistrationProvider.__init__(self, provider_config)
        self.project_id = provider_config["project_id"]
        self.managed_zone = provider_config["managed_zone"]
        self.hostname = provider_config["hostname"]
        if dns is None:
            try:
                dns = construct_dns_client()
            except GoogleAuthError as e:
                raise RegistrationError(
                    "Unable to load the GCP credentials: {}".format(e)) from e
        self.dns = dns

    def update(self, instances: List[Instance]) -> None:
        try:
            self.update_a_records(
                self.hostname, [instance.endpoint for instance in instances])
        except errors.HttpError as e:
            raise RegistrationError(
                "Unable to update the A record {} in {}: {}".format(
                    self.hostname, self.managed_zone, e)) from e

    def update_a_records(self, name, values):
        zone = self.dns.managedZones().get(
            project=self.project_id, managedZone=self.managed_zone).execute()
        fqdn = name + "." + zone["dnsName"]

        response = self.dns.resourceRecordSets().list(
            project=self.project_id, managedZone=self.managed_zone,
            name=fqdn, type="A").execute()
        existing = response.get("rrsets", [])

        record_set = {
            "name": fqdn,
            "type": "A",
            "ttl": CLOUD_DNS_RECORD_TTL,
            "rrdatas": values,
        }
        if existing and _same_record_set(existing[0], record_set):
            logger.info("{} is already set to {}".format(fqdn, values))
            return

        # Upserts are additions with the deletion of the old record set
        change = {
            "additions": [record_set],
            "deletions": existing,
        }
        self.dns.changes().create(
            project=self.project_id, managedZone=self.managed_zone,
            body=change).execute()
        logger.info("Successfully set {} to {}".format(fqdn, values))


def _same_record_set(existing, record_set):
    for key in ["name", "type", "ttl", "rrdatas"]:
        if existing.get(key) != record_set[key]:
            return False
    return True
