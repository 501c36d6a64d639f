from typing import List

from etcdbootstrap.core._private.constants import ETCD_LOOPBACK_ADDRESS
from etcdbootstrap.core._private.utils import client_url, peer_url


def _get_initial_cluster(instances, authoritative_peer_urls, scheme) -> str:
    authoritative_peer_urls = set(authoritative_peer_urls)
    initial_cluster = []
    for instance in instances:
        instance_peer_url = peer_url(instance.endpoint, scheme)
        if instance_peer_url in authoritative_peer_urls:
            initial_cluster.append(
                "{}={}".format(instance.name, instance_peer_url))
    return ",".join(initial_cluster)


def _get_tls_flags(tls_config) -> List[str]:
    return [
        "ETCD_CLIENT_CERT_AUTH=true",
        "ETCD_TRUSTED_CA_FILE={}".format(tls_config.client_ca),
        "ETCD_CERT_FILE={}".format(tls_config.client_cert),
        "ETCD_KEY_FILE={}".format(tls_config.client_key),
        "ETCD_PEER_CLIENT_CERT_AUTH=true",
        "ETCD_PEER_TRUSTED_CA_FILE={}".format(tls_config.peer_ca),
        "ETCD_PEER_CERT_FILE={}".format(tls_config.peer_cert),
        "ETCD_PEER_KEY_FILE={}".format(tls_config.peer_key),
    ]


def render(state, authoritative_peer_urls, instances, local_instance,
           scheme, tls_config=None) -> str:
    """Render the etcd environment variables for the local instance.

    The lines are always emitted in the same order so the output only
    changes when the cluster does.
    """
    local_peer_url = peer_url(local_instance.endpoint, scheme)
    local_client_url = client_url(local_instance.endpoint, scheme)
    loopback_client_url = client_url(ETCD_LOOPBACK_ADDRESS, scheme)

    flags = [
        "ETCD_INITIAL_CLUSTER_STATE={}".format(state),
        "ETCD_INITIAL_CLUSTER={}".format(_get_initial_cluster(
            instances, authoritative_peer_urls, scheme)),
        "ETCD_NAME={}".format(local_instance.name),
        "ETCD_INITIAL_ADVERTISE_PEER_URLS={}".format(local_peer_url),
        "ETCD_LISTEN_PEER_URLS={}".format(local_peer_url),
        "ETCD_LISTEN_CLIENT_URLS={},{}".format(
            local_client_url, loopback_client_url),
        "ETCD_ADVERTISE_CLIENT_URLS={}".format(local_client_url),
    ]
    if tls_config is not None:
        flags.extend(_get_tls_flags(tls_config))
    return "\n".join(flags) + "\n"
