from etcdbootstrap.core._private.constants import ETCD_PEER_PORT, ETCD_CLIENT_PORT, \
    ETCD_SCHEME_HTTP, ETCD_SCHEME_HTTPS

URL_FORMAT = "{}://{}:{}"


class EtcdBootstrapError(RuntimeError):
    pass


class InstanceDirectoryError(EtcdBootstrapError):
    """The instances of the cluster cannot be enumerated or identified."""
    pass


class EtcdMembersError(EtcdBootstrapError):
    """A genuine failure reading or changing the etcd member list."""
    pass


class EtcdTLSError(EtcdMembersError):
    pass


class TLSConfigError(EtcdBootstrapError):
    pass


class RegistrationError(EtcdBootstrapError):
    pass


def get_scheme(tls_enabled: bool) -> str:
    return ETCD_SCHEME_HTTPS if tls_enabled else ETCD_SCHEME_HTTP


def peer_url(endpoint: str, scheme: str = ETCD_SCHEME_HTTP) -> str:
    return URL_FORMAT.format(scheme, endpoint, ETCD_PEER_PORT)


def client_url(endpoint: str, scheme: str = ETCD_SCHEME_HTTP) -> str:
    return URL_FORMAT.format(scheme, endpoint, ETCD_CLIENT_PORT)


def get_instance_peer_urls(instances, scheme: str = ETCD_SCHEME_HTTP):
    return [peer_url(instance.endpoint, scheme) for instance in instances]


def get_instance_client_urls(instances, scheme: str = ETCD_SCHEME_HTTP):
    return [client_url(instance.endpoint, scheme) for instance in instances]
