import logging
from typing import List, Tuple

from etcdbootstrap.core._private.bootstrap.reconcile import reconcile
from etcdbootstrap.core._private.utils import EtcdMembersError, \
    get_instance_peer_urls, peer_url

logger = logging.getLogger(__name__)

CLUSTER_STATE_NEW = "new"
CLUSTER_STATE_EXISTING = "existing"


def _is_registered(members, local_instance, scheme) -> bool:
    local_peer_url = peer_url(local_instance.endpoint, scheme)
    for member in members:
        if member.peer_url == local_peer_url and not member.is_half_joined():
            return True
    return False


def decide(instance_directory, members_api, scheme) -> Tuple[str, List[str]]:
    """Decide how the local node joins the cluster.

    Returns the cluster state and the peer URLs the initial cluster
    is restricted to.
    """
    members = members_api.list_members()
    instances = instance_directory.list_instances()

    if not members:
        logger.info("No cluster found, bootstrapping a new cluster.")
        return CLUSTER_STATE_NEW, get_instance_peer_urls(instances, scheme)

    local_instance = instance_directory.get_local_instance()
    if _is_registered(members, local_instance, scheme):
        # etcd ignores the initial cluster flags once the node has joined
        logger.info("{} is already a member of the cluster.".format(
            local_instance.name))
        return CLUSTER_STATE_NEW, get_instance_peer_urls(instances, scheme)

    logger.info("Joining the existing cluster as {}.".format(
        local_instance.name))
    reconcile(members_api, members, instances, local_instance, scheme)
    members = members_api.list_members()
    if not members:
        raise EtcdMembersError(
            "The cluster is no longer reachable after adding {}.".format(
                local_instance.name))
    return CLUSTER_STATE_EXISTING, [member.peer_url for member in members]
