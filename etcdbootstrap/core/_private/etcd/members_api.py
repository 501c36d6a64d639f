import logging
from typing import Any, Dict, List, Optional

import requests

from etcdbootstrap.core._private.constants import ETCD_BOOTSTRAP_REQUEST_TIMEOUT
from etcdbootstrap.core._private.utils import EtcdMembersError, EtcdTLSError, \
    get_scheme, get_instance_client_urls

logger = logging.getLogger(__name__)

# etcd v3 cluster API through the JSON gateway
REST_ENDPOINT_MEMBER_LIST = "/v3/cluster/member/list"
REST_ENDPOINT_MEMBER_ADD = "/v3/cluster/member/add"
REST_ENDPOINT_MEMBER_REMOVE = "/v3/cluster/member/remove"


class Member:
    """A member of the etcd cluster.

    The name is None until the owning node has started and
    completed its join. Such a member is half joined.
    """

    __slots__ = ("name", "peer_url")

    def __init__(self, name: Optional[str], peer_url: str) -> None:
        self.name = name or None
        self.peer_url = peer_url

    def is_half_joined(self) -> bool:
        return self.name is None

    def __eq__(self, other):
        if not isinstance(other, Member):
            return NotImplemented
        return self.name == other.name and self.peer_url == other.peer_url

    def __hash__(self):
        return hash((self.name, self.peer_url))

    def __repr__(self):
        return "Member(name={!r}, peer_url={!r})".format(
            self.name, self.peer_url)


class NoEndpointAvailableError(EtcdMembersError):
    """None of the etcd endpoints accepted a connection."""
    pass


def _get_single_peer_url(etcd_member: Dict[str, Any]) -> str:
    peer_urls = etcd_member.get("peerURLs") or []
    if len(peer_urls) != 1:
        raise EtcdMembersError(
            "Expected a single peer URL, but found {} for {}.".format(
                peer_urls, etcd_member.get("ID")))
    return peer_urls[0]


class EtcdMembersAPI:
    """Client of the etcd cluster membership API.

    The client URLs of every instance from the instance directory are used
    as endpoints. They are tried in order until one of them answers.
    """

    def __init__(self, instance_directory, tls_config=None,
                 timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT):
        self.instance_directory = instance_directory
        self.tls_config = tls_config
        self.scheme = get_scheme(tls_config is not None)
        self.timeout = timeout
        self._endpoints = None
        self._session = None

    def _get_endpoints(self) -> List[str]:
        if self._endpoints is None:
            instances = self.instance_directory.list_instances()
            self._endpoints = get_instance_client_urls(instances, self.scheme)
        return self._endpoints

    def _get_session(self) -> requests.Session:
        if self._session is None:
            session = requests.Session()
            # never go through a proxy to reach the cluster nodes
            session.trust_env = False
            if self.tls_config is not None:
                session.cert = self.tls_config.get_peer_cert()
                session.verify = self.tls_config.peer_ca
            self._session = session
        return self._session

    def _call(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        endpoints = self._get_endpoints()
        if not endpoints:
            raise NoEndpointAvailableError("No etcd endpoints to connect to.")

        session = self._get_session()
        errors = []
        server_errors = []
        for client_url in endpoints:
            url = client_url + endpoint
            try:
                response = session.post(url, json=body, timeout=self.timeout)
            except requests.exceptions.SSLError as e:
                # TLS errors are unexpected, so fail.
                raise EtcdTLSError(
                    "There is an error with the TLS certificates "
                    "talking to {}: {}".format(url, e)) from e
            except requests.exceptions.ConnectionError as e:
                logger.debug("Unable to connect to {}: {}".format(url, e))
                errors.append(e)
                continue
            except requests.exceptions.Timeout as e:
                raise EtcdMembersError(
                    "Timed out waiting for {}: {}".format(url, e)) from e

            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                error = EtcdMembersError(
                    "Request to {} failed: {} {}".format(
                        url, e, response.text))
                if response.status_code < 500:
                    raise error from e
                # A member starting up or without a leader, try the next one
                logger.debug(str(error))
                server_errors.append(error)
                continue

            try:
                return response.json()
            except ValueError as e:
                raise EtcdMembersError(
                    "Invalid response from {}: {}".format(url, e)) from e

        if server_errors:
            raise server_errors[-1]
        raise NoEndpointAvailableError(
            "Unable to connect to any of the etcd endpoints {}: {}".format(
                endpoints, errors[-1]))

    def _list(self) -> List[Dict[str, Any]]:
        response = self._call(REST_ENDPOINT_MEMBER_LIST, {})
        return response.get("members") or []

    def list_members(self) -> List[Member]:
        """Return the members of the cluster.

        An empty list is returned if no etcd endpoint is up, which is
        the case when the cluster has not been formed yet.
        """
        try:
            etcd_members = self._list()
        except NoEndpointAvailableError as e:
            logger.info(
                "Detected cluster errors, this is normal when "
                "bootstrapping a new cluster: {}".format(e))
            return []

        members = []
        for etcd_member in etcd_members:
            members.append(Member(
                name=etcd_member.get("name"),
                peer_url=_get_single_peer_url(etcd_member)))
        return members

    def add_member(self, peer_url: str) -> None:
        """Add a new member to the cluster by its peer URL.

        etcd requires the peer URL to be added first. The new node then
        informs etcd of its name when it starts.
        """
        self._call(REST_ENDPOINT_MEMBER_ADD, {"peerURLs": [peer_url]})

    def remove_member(self, name: Optional[str],
                      peer_url: Optional[str] = None) -> None:
        """Remove a member of the cluster by its name.

        If peer_url is given, the member must also match it. This is needed
        to pick the right member when the name is empty.
        """
        name = name or None
        for etcd_member in self._list():
            if (etcd_member.get("name") or None) != name:
                continue
            if peer_url is not None and peer_url not in (
                    etcd_member.get("peerURLs") or []):
                continue
            self._call(REST_ENDPOINT_MEMBER_REMOVE, {"ID": etcd_member["ID"]})
            return

        logger.info("{} has already been removed".format(name or peer_url))
