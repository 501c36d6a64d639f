import socket
from unittest.mock import patch

import pytest
from dnslib import A, QTYPE, RCODE, RR, SRV, TXT, DNSRecord

from etcdbootstrap.core.instance_directory import Instance
from etcdbootstrap.core._private.utils import InstanceDirectoryError
from etcdbootstrap.providers._private.srv.instance_directory import \
    DNSResolver, SRVInstanceDirectory, get_system_nameservers, get_txt_name

SRV_NAME = "_etcd-bootstrap._tcp.example.com"

DNS_ZONE = {
    (SRV_NAME, "SRV"): [
        SRV(priority=0, weight=0, port=2380, target="etcd-0.example.com."),
        SRV(priority=0, weight=0, port=2380, target="etcd-1.example.com."),
    ],
    ("etcd-0.example.com", "TXT"): [TXT(["owner=etcd"]), TXT("name=e0")],
    ("etcd-1.example.com", "TXT"): [TXT("name=e1")],
    ("etcd-0.example.com", "A"): [A("10.0.0.1")],
    ("etcd-1.example.com", "A"): [A("10.0.0.2")],
}


TRUNCATING_NAMESERVER = "10.0.0.54"


def fake_send(query, host, port=53, tcp=False, timeout=None):
    if host == "10.255.255.1":
        raise socket.timeout("timed out")
    name = str(query.q.qname).rstrip(".")
    qtype = QTYPE.get(query.q.qtype)
    reply = query.reply()
    records = DNS_ZONE.get((name, qtype))
    if records is None:
        reply.header.rcode = RCODE.NXDOMAIN
    elif host == TRUNCATING_NAMESERVER and not tcp:
        # only the first record fits in the datagram
        reply.header.tc = 1
        records = records[:1]
    for rdata in records or []:
        reply.add_answer(RR(query.q.qname, getattr(QTYPE, qtype), rdata=rdata))
    return reply.pack()


@pytest.fixture()
def dns_server():
    with patch.object(DNSRecord, "send", autospec=True,
                      side_effect=fake_send) as send:
        yield send


class StubResolver:
    def __init__(self, srv, txt, ips=None):
        self.srv = srv
        self.txt = txt
        self.ips = ips or {}

    def lookup_srv(self, name):
        return self.srv[name]

    def lookup_txt(self, name):
        return self.txt[name]

    def lookup_ip(self, name):
        return self.ips.get(name, [])


def _srv_directory(resolver, local_ip="10.0.0.2"):
    return SRVInstanceDirectory({
        "type": "srv",
        "domain_name": "example.com",
        "local_ip": local_ip,
    }, resolver=resolver)


class TestSRVInstanceDirectory:
    def test_list_instances(self):
        resolver = StubResolver(
            srv={SRV_NAME: ["10.0.0.1", "10.0.0.2"]},
            txt={"10.0.0.1": ["name=e0"], "10.0.0.2": ["x", "name=e1"]})

        assert _srv_directory(resolver).list_instances() == [
            Instance("e0", "10.0.0.1"),
            Instance("e1", "10.0.0.2"),
        ]

    def test_missing_name_attribute(self):
        resolver = StubResolver(
            srv={SRV_NAME: ["10.0.0.1"]},
            txt={"10.0.0.1": ["owner=etcd"]})

        with pytest.raises(InstanceDirectoryError, match="name="):
            _srv_directory(resolver).list_instances()

    def test_local_instance_by_ip_endpoint(self):
        resolver = StubResolver(
            srv={SRV_NAME: ["10.0.0.1", "10.0.0.2"]},
            txt={"10.0.0.1": ["name=e0"], "10.0.0.2": ["name=e1"]})

        assert _srv_directory(resolver).get_local_instance() == \
            Instance("e1", "10.0.0.2")

    def test_local_instance_by_hostname(self):
        resolver = StubResolver(
            srv={SRV_NAME: ["etcd-0.example.com", "etcd-1.example.com"]},
            txt={"etcd-0.example.com": ["name=e0"],
                 "etcd-1.example.com": ["name=e1"]},
            ips={"etcd-0.example.com": ["10.0.0.1"],
                 "etcd-1.example.com": ["10.0.0.2"]})

        assert _srv_directory(resolver, "10.0.0.1").get_local_instance() == \
            Instance("e0", "etcd-0.example.com")

    def test_local_instance_not_found(self):
        resolver = StubResolver(
            srv={SRV_NAME: ["10.0.0.1"]},
            txt={"10.0.0.1": ["name=e0"]})

        with pytest.raises(InstanceDirectoryError, match="10.0.0.7"):
            _srv_directory(resolver, "10.0.0.7").get_local_instance()

    def test_with_dns_server(self, dns_server):
        directory = SRVInstanceDirectory({
            "type": "srv",
            "domain_name": "example.com",
            "service": "etcd-bootstrap",
            "local_ip": "10.0.0.2",
            "nameservers": ["10.255.255.1", "10.0.0.53:5353"],
        })

        assert directory.list_instances() == [
            Instance("e0", "etcd-0.example.com"),
            Instance("e1", "etcd-1.example.com"),
        ]
        assert directory.get_local_instance() == \
            Instance("e1", "etcd-1.example.com")
        _, kwargs = dns_server.call_args
        assert kwargs["port"] == 5353

    def test_srv_record_not_found(self, dns_server):
        directory = SRVInstanceDirectory({
            "type": "srv",
            "domain_name": "example.org",
            "local_ip": "10.0.0.2",
            "nameservers": ["10.0.0.53"],
        })

        with pytest.raises(InstanceDirectoryError, match="NXDOMAIN"):
            directory.list_instances()

    def test_all_nameservers_down(self, dns_server):
        resolver = DNSResolver(["10.255.255.1"])

        with pytest.raises(InstanceDirectoryError, match="all the nameservers"):
            resolver.lookup_srv(SRV_NAME)

    def test_truncated_answer_is_retried_over_tcp(self, dns_server):
        resolver = DNSResolver([TRUNCATING_NAMESERVER])

        assert resolver.lookup_srv(SRV_NAME) == [
            "etcd-0.example.com", "etcd-1.example.com"]
        assert [c[1]["tcp"] for c in dns_server.call_args_list] == [
            False, True]


def test_get_txt_name():
    assert get_txt_name(["novalue", "role=etcd", "name=e0=x"]) == "e0=x"
    assert get_txt_name(["role=etcd"]) is None


def test_get_system_nameservers(tmp_path):
    resolv_conf = tmp_path / "resolv.conf"
    resolv_conf.write_text(
        "# generated\n"
        "search example.com\n"
        "nameserver 10.0.0.2\n"
        "nameserver 10.0.0.3\n")

    assert get_system_nameservers(str(resolv_conf)) == [
        ("10.0.0.2", 53), ("10.0.0.3", 53)]
    assert get_system_nameservers(str(tmp_path / "missing")) == []


if __name__ == "__main__":
    import sys

    sys.exit(pytest.main(["-v", __file__]))
