import pytest

from etcdbootstrap.core._private.bootstrap.render import render
from etcdbootstrap.core._private.etcd.tls import TLSConfig
from etcdbootstrap.tests.utils.fakes import make_instance

INSTANCE_A = make_instance("i-a", "10.0.0.1")
INSTANCE_B = make_instance("i-b", "10.0.0.2")
INSTANCE_C = make_instance("i-c", "10.0.0.3")

INSTANCES = [INSTANCE_A, INSTANCE_B, INSTANCE_C]

TLS_FILES = [
    "client-ca.pem", "client.pem", "client-key.pem",
    "peer-ca.pem", "peer.pem", "peer-key.pem"]


@pytest.fixture()
def tls_config(tmp_path):
    paths = []
    for name in TLS_FILES:
        path = tmp_path / name
        path.write_text("certificate")
        paths.append(str(path))
    return TLSConfig(*paths)


class TestRender:
    def test_initial_cluster_follows_directory_order(self):
        authoritative = ["http://10.0.0.3:2380", "http://10.0.0.1:2380"]

        flags = render("existing", authoritative, INSTANCES, INSTANCE_A, "http")

        assert flags.splitlines()[:2] == [
            "ETCD_INITIAL_CLUSTER_STATE=existing",
            "ETCD_INITIAL_CLUSTER=i-a=http://10.0.0.1:2380,"
            "i-c=http://10.0.0.3:2380",
        ]

    def test_peer_urls_outside_directory_are_ignored(self):
        authoritative = ["http://10.0.0.2:2380", "http://10.0.0.9:2380"]

        flags = render("existing", authoritative, INSTANCES, INSTANCE_A, "http")

        assert "ETCD_INITIAL_CLUSTER=i-b=http://10.0.0.2:2380\n" in flags

    def test_ends_with_newline(self):
        flags = render("new", [], INSTANCES, INSTANCE_A, "http")

        assert flags.endswith("ETCD_ADVERTISE_CLIENT_URLS=http://10.0.0.1:2379\n")
        assert "ETCD_INITIAL_CLUSTER=\n" in flags

    def test_tls(self, tls_config):
        authoritative = ["https://10.0.0.1:2380", "https://10.0.0.2:2380"]

        flags = render("new", authoritative, INSTANCES, INSTANCE_B, "https",
                       tls_config)

        lines = flags.splitlines()
        assert lines[:7] == [
            "ETCD_INITIAL_CLUSTER_STATE=new",
            "ETCD_INITIAL_CLUSTER=i-a=https://10.0.0.1:2380,"
            "i-b=https://10.0.0.2:2380",
            "ETCD_NAME=i-b",
            "ETCD_INITIAL_ADVERTISE_PEER_URLS=https://10.0.0.2:2380",
            "ETCD_LISTEN_PEER_URLS=https://10.0.0.2:2380",
            "ETCD_LISTEN_CLIENT_URLS=https://10.0.0.2:2379,"
            "https://127.0.0.1:2379",
            "ETCD_ADVERTISE_CLIENT_URLS=https://10.0.0.2:2379",
        ]
        assert lines[7:] == [
            "ETCD_CLIENT_CERT_AUTH=true",
            "ETCD_TRUSTED_CA_FILE={}".format(tls_config.client_ca),
            "ETCD_CERT_FILE={}".format(tls_config.client_cert),
            "ETCD_KEY_FILE={}".format(tls_config.client_key),
            "ETCD_PEER_CLIENT_CERT_AUTH=true",
            "ETCD_PEER_TRUSTED_CA_FILE={}".format(tls_config.peer_ca),
            "ETCD_PEER_CERT_FILE={}".format(tls_config.peer_cert),
            "ETCD_PEER_KEY_FILE={}".format(tls_config.peer_key),
        ]


if __name__ == "__main__":
    import sys

    sys.exit(pytest.main(["-v", __file__]))
