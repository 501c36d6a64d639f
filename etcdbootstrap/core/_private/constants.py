import os


def env_integer(key, default):
    """Read an integer override from the environment."""
    val = os.environ.get(key)
    if val is None or not val.strip():
        return default
    return int(val)


# The port etcd peers use to reach each other for replication traffic
ETCD_PEER_PORT = 2380

# The port etcd clients use for reads and writes
ETCD_CLIENT_PORT = 2379

ETCD_LOOPBACK_ADDRESS = "127.0.0.1"

ETCD_SCHEME_HTTP = "http"
ETCD_SCHEME_HTTPS = "https"

# Timeout in seconds for a single call to etcd or a DNS server.
# A wedged endpoint must not hang the boot sequence.
ETCD_BOOTSTRAP_REQUEST_TIMEOUT = env_integer(
    "ETCD_BOOTSTRAP_REQUEST_TIMEOUT", 5)

ETCD_BOOTSTRAP_DEFAULT_OUTPUT_FILE = "/var/run/etcd-bootstrap.conf"

# Environment variable to read the vSphere password from
VSPHERE_PASSWORD_ENV = "VSPHERE_PASSWORD"

LOGGER_FORMAT = (
    "%(asctime)s\t%(levelname)s %(filename)s:%(lineno)s -- %(message)s")
LOGGER_FORMAT_HELP = f"The logging format. default='{LOGGER_FORMAT}'"
LOGGER_LEVEL_INFO = "info"
LOGGER_LEVEL_CHOICES = ["debug", "info", "warning", "error", "critical"]
LOGGER_LEVEL_HELP = "The logging level threshold, default='info'"
