import logging
import os

from etcdbootstrap.core._private.bootstrap.decision import decide
from etcdbootstrap.core._private.bootstrap.render import render
from etcdbootstrap.core._private.etcd.members_api import EtcdMembersAPI
from etcdbootstrap.core._private.utils import get_scheme

logger = logging.getLogger(__name__)

ETCD_FLAGS_FILE_MODE = 0o644


class Bootstrapper:
    """Generate the etcd flags the local instance needs to join its cluster.

    The instance directory tells which instances should form the cluster,
    the members API tells what etcd currently thinks. If the cluster already
    exists, the member list is reconciled before the flags are generated.
    """

    def __init__(self, instance_directory, members_api=None, tls_config=None):
        self.instance_directory = instance_directory
        self.tls_config = tls_config
        self.scheme = get_scheme(tls_config is not None)
        if members_api is None:
            members_api = EtcdMembersAPI(instance_directory, tls_config)
        self.members_api = members_api

    def generate_etcd_flags(self) -> str:
        logger.info("Generating etcd cluster flags")
        state, peer_urls = decide(
            self.instance_directory, self.members_api, self.scheme)
        return render(
            state, peer_urls,
            self.instance_directory.list_instances(),
            self.instance_directory.get_local_instance(),
            self.scheme, self.tls_config)

    def generate_etcd_flags_file(self, output_file: str) -> str:
        """Generate the etcd flags and write them to a file.

        The file is intended to be sourced by the etcd startup scripts.
        """
        etcd_flags = self.generate_etcd_flags()
        logger.info("Writing environment variables to {}".format(output_file))
        with open(output_file, "w") as f:
            f.write(etcd_flags)
        os.chmod(output_file, ETCD_FLAGS_FILE_MODE)
        return etcd_flags
