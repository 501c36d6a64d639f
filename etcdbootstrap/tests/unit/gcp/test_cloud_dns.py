from unittest.mock import MagicMock

import pytest

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.providers._private.gcp.cloud_dns import \
    CloudDNSRegistrationProvider

INSTANCES = [Instance("etcd-0", "10.0.0.1"), Instance("etcd-1", "10.0.0.2")]

A_RECORD = {
    "name": "etcd.example.com.",
    "type": "A",
    "ttl": 300,
    "rrdatas": ["10.0.0.1", "10.0.0.2"],
}


def _dns(existing_rrsets):
    dns = MagicMock()
    dns.managedZones().get().execute.return_value = {
        "name": "example", "dnsName": "example.com."}
    dns.resourceRecordSets().list().execute.return_value = {
        "rrsets": existing_rrsets}
    return dns


def _provider(dns):
    return CloudDNSRegistrationProvider({
        "type": "gcp_dns",
        "project_id": "project-one",
        "managed_zone": "example",
        "hostname": "etcd",
    }, dns=dns)


class TestCloudDNSRegistrationProvider:
    def test_create_record(self):
        dns = _dns([])

        _provider(dns).update(INSTANCES)

        dns.changes().create.assert_called_once_with(
            project="project-one", managedZone="example",
            body={"additions": [A_RECORD], "deletions": []})

    def test_replace_record(self):
        old_record = dict(A_RECORD, rrdatas=["10.0.0.9"])
        dns = _dns([old_record])

        _provider(dns).update(INSTANCES)

        dns.changes().create.assert_called_once_with(
            project="project-one", managedZone="example",
            body={"additions": [A_RECORD], "deletions": [old_record]})

    def test_record_up_to_date(self):
        dns = _dns([dict(A_RECORD, kind="dns#resourceRecordSet")])

        _provider(dns).update(INSTANCES)

        dns.changes().create.assert_not_called()


if __name__ == "__main__":
    import sys

    sys.exit(pytest.main(["-v", __file__]))
