import logging
import os
import socket
from typing import Any, Dict, List, Optional, Tuple

from dnslib import QTYPE, RCODE, DNSError, DNSRecord

from etcdbootstrap.core.instance_directory import Instance, InstanceDirectory
from etcdbootstrap.core._private.constants import ETCD_BOOTSTRAP_REQUEST_TIMEOUT
from etcdbootstrap.core._private.utils import InstanceDirectoryError

logger = logging.getLogger(__name__)

SRV_PROTO = "tcp"
SRV_DEFAULT_SERVICE = "etcd-bootstrap"
DNS_DEFAULT_PORT = 53
RESOLV_CONF_PATH = "/etc/resolv.conf"

# RFC 1464 attribute carrying the instance name
TXT_NAME_ATTRIBUTE = "name"


def _parse_nameserver(nameserver: str) -> Tuple[str, int]:
    host, _, port = nameserver.partition(":")
    return host, int(port) if port else DNS_DEFAULT_PORT


def get_system_nameservers(resolv_conf=RESOLV_CONF_PATH) -> List[Tuple[str, int]]:
    nameservers = []
    if not os.path.exists(resolv_conf):
        return nameservers
    with open(resolv_conf) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            if parts[0] == "nameserver" and len(parts) >= 2:
                nameservers.append((parts[1], DNS_DEFAULT_PORT))
    return nameservers


class DNSResolver:
    """A small DNS client asking the nameservers in order until one answers."""

    def __init__(self, nameservers=None, timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT):
        if nameservers:
            self.nameservers = [_parse_nameserver(ns) for ns in nameservers]
        else:
            self.nameservers = get_system_nameservers()
        self.timeout = timeout

    def _query(self, name: str, qtype: str) -> List:
        if not self.nameservers:
            raise InstanceDirectoryError(
                "No DNS nameservers available to lookup {}.".format(name))

        query = DNSRecord.question(name, qtype)
        errors = []
        for host, port in self.nameservers:
            try:
                response = DNSRecord.parse(query.send(
                    host, port=port, tcp=False, timeout=self.timeout))
                if response.header.tc:
                    # The answer did not fit in a UDP datagram
                    logger.debug("Truncated DNS {} answer for {} from {}:{}, "
                                 "retrying over TCP".format(qtype, name, host, port))
                    response = DNSRecord.parse(query.send(
                        host, port=port, tcp=True, timeout=self.timeout))
            except (OSError, DNSError) as e:
                logger.debug("DNS {} query for {} failed ({}:{}): {}".format(
                    qtype, name, host, port, e))
                errors.append(e)
                continue

            rcode = response.header.rcode
            if rcode != RCODE.NOERROR:
                raise InstanceDirectoryError(
                    "DNS {} query for {} failed: {}".format(
                        qtype, name, RCODE.get(rcode)))
            return [rr for rr in response.rr
                    if rr.rtype == getattr(QTYPE, qtype)]

        raise InstanceDirectoryError(
            "DNS {} query for {} failed on all the nameservers: {}".format(
                qtype, name, errors[-1]))

    def lookup_srv(self, name: str) -> List[str]:
        """Return the targets of the SRV record without the trailing dot."""
        return [str(rr.rdata.target).rstrip(".")
                for rr in self._query(name, "SRV")]

    def lookup_txt(self, name: str) -> List[str]:
        records = []
        for rr in self._query(name, "TXT"):
            records.append("".join(
                data.decode("utf-8") for data in rr.rdata.data))
        return records

    def lookup_ip(self, name: str) -> List[str]:
        return [str(rr.rdata) for rr in self._query(name, "A")]


def get_txt_name(records: List[str]) -> Optional[str]:
    for record in records:
        key, sep, value = record.partition("=")
        if not sep:
            # No '=' so skip
            continue
        if key == TXT_NAME_ATTRIBUTE:
            return value
    return None


def _is_ip_address(endpoint: str) -> bool:
    try:
        socket.inet_aton(endpoint)
    except OSError:
        return False
    return True


class SRVInstanceDirectory(InstanceDirectory):
    """The instances listed by the SRV record _<service>._tcp.<domain>.

    The name of each instance is taken from the TXT record of the SRV
    target, which must carry a name=<value> attribute. The local instance
    is the one whose endpoint resolves to the local IP of this host.
    """

    def __init__(self, provider_config: Dict[str, Any],
                 resolver: Optional[DNSResolver] = None) -> None:
        InstanceDirectory.__init__(self, provider_config)
        self.domain_name = provider_config["domain_name"]
        self.service = provider_config.get("service", SRV_DEFAULT_SERVICE)
        self.local_ip = provider_config["local_ip"]
        if resolver is None:
            resolver = DNSResolver(provider_config.get("nameservers"))
        self.resolver = resolver
        self._instances = None
        self._local_instance = None

    def get_srv_name(self) -> str:
        return "_{}._{}.{}".format(self.service, SRV_PROTO, self.domain_name)

    def list_instances(self) -> List[Instance]:
        if self._instances is None:
            srv_name = self.get_srv_name()
            try:
                targets = self.resolver.lookup_srv(srv_name)
            except InstanceDirectoryError as e:
                raise InstanceDirectoryError(
                    "Unable to lookup SRV for {}: {}".format(srv_name, e)) from e

            instances = []
            for target in targets:
                name = get_txt_name(self.resolver.lookup_txt(target))
                if name is None:
                    raise InstanceDirectoryError(
                        "No TXT record with `name=` attribute found "
                        "for {}".format(target))
                instances.append(Instance(name=name, endpoint=target))
            self._instances = instances
        return self._instances

    def get_local_instance(self) -> Instance:
        if self._local_instance is None:
            for instance in self.list_instances():
                if self._resolves_to_local_ip(instance.endpoint):
                    self._local_instance = instance
                    break
            else:
                raise InstanceDirectoryError(
                    "Unable to find an instance in {} for the local IP "
                    "{}".format(self.get_srv_name(), self.local_ip))
        return self._local_instance

    def _resolves_to_local_ip(self, endpoint: str) -> bool:
        if endpoint == self.local_ip:
            return True
        if _is_ip_address(endpoint):
            return False
        return self.local_ip in self.resolver.lookup_ip(endpoint)
