import logging
from typing import List

from etcdbootstrap.core._private.utils import EtcdMembersError, peer_url

logger = logging.getLogger(__name__)


def get_stale_members(members, instances, scheme) -> List:
    """Return the members which no longer match any of the instances.

    A half joined member whose peer URL belongs to a live instance is
    not stale. Its node simply has not started etcd yet.
    """
    instance_names = set(instance.name for instance in instances)
    instance_peer_urls = set(
        peer_url(instance.endpoint, scheme) for instance in instances)

    stale_members = []
    for member in members:
        if member.name in instance_names:
            continue
        if member.is_half_joined() and member.peer_url in instance_peer_urls:
            continue
        stale_members.append(member)
    return stale_members


def remove_stale_members(members_api, members, instances, scheme) -> None:
    for member in get_stale_members(members, instances, scheme):
        logger.info("Removing stale member {} ({}) from the cluster.".format(
            member.name, member.peer_url))
        try:
            members_api.remove_member(member.name, member.peer_url)
        except EtcdMembersError as e:
            # No quorum for example. The add may still go through.
            logger.warning(
                "Unable to remove old member {}, ignoring: {}".format(
                    member.name or member.peer_url, e))


def add_local_member(members_api, members, local_instance, scheme) -> None:
    local_peer_url = peer_url(local_instance.endpoint, scheme)
    member_names = set(member.name for member in members)
    member_peer_urls = set(member.peer_url for member in members)
    if local_instance.name in member_names or local_peer_url in member_peer_urls:
        logger.info("{} is already a member of the cluster.".format(
            local_instance.name))
        return

    logger.info("Adding {} ({}) to the cluster.".format(
        local_instance.name, local_peer_url))
    try:
        members_api.add_member(local_peer_url)
    except EtcdMembersError as e:
        raise EtcdMembersError(
            "Unable to add the local instance {} to the cluster: {}".format(
                local_peer_url, e)) from e


def reconcile(members_api, members, instances, local_instance, scheme) -> None:
    """Bring the etcd member list in line with the live instances.

    Stale members are removed before the local instance is added so that
    a replaced node does not push the cluster out of quorum.
    """
    remove_stale_members(members_api, members, instances, scheme)
    add_local_member(members_api, members, local_instance, scheme)
