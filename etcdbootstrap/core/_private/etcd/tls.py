import os

from etcdbootstrap.core._private.utils import TLSConfigError


class TLSConfig:
    """The certificate files used for mutual TLS with etcd.

    The client files are handed to etcd for its client port and the
    peer files for its peer port. The peer files are also used by the
    bootstrapper itself when talking to the etcd members API.
    All the files are checked when the config is created.
    """

    def __init__(self, client_ca, client_cert, client_key,
                 peer_ca, peer_cert, peer_key):
        self.client_ca = client_ca
        self.client_cert = client_cert
        self.client_key = client_key
        self.peer_ca = peer_ca
        self.peer_cert = peer_cert
        self.peer_key = peer_key
        self._validate()

    def _validate(self):
        files = [
            ("client CA", self.client_ca),
            ("client certificate", self.client_cert),
            ("client key", self.client_key),
            ("peer CA", self.peer_ca),
            ("peer certificate", self.peer_cert),
            ("peer key", self.peer_key),
        ]
        for name, path in files:
            if not path or not path.strip():
                raise TLSConfigError(
                    "The TLS {} file path is required.".format(name))
            _check_readable(name, path)

    def get_peer_cert(self):
        return self.peer_cert, self.peer_key


def _check_readable(name, path):
    if not os.path.isfile(path):
        raise TLSConfigError(
            "The TLS {} file {} is inaccessible.".format(name, path))
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise TLSConfigError(
            "The TLS {} file {} is unreadable: {}".format(name, path, e)) from e
