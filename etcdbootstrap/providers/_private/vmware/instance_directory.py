import logging
import ssl
import time
from typing import Any, Dict, List

from pyVim.connect import Disconnect, SmartConnect
from pyVmomi import vim, vmodl

from etcdbootstrap.core.instance_directory import Instance, InstanceDirectory
from etcdbootstrap.core._private.constants import ETCD_BOOTSTRAP_REQUEST_TIMEOUT
from etcdbootstrap.core._private.utils import InstanceDirectoryError

logger = logging.getLogger(__name__)

VSPHERE_DEFAULT_PORT = 443
VSPHERE_DEFAULT_MAX_API_ATTEMPTS = 3
VSPHERE_RETRY_BACKOFF_S = 1

TAG_ENVIRONMENT = "tags_environment"
TAG_ROLE = "tags_role"


def matches_tag(vm, tag, value) -> bool:
    if vm.config is None:
        return False
    for option in vm.config.extraConfig:
        if option.key == tag and option.value == value:
            return True
    return False


def is_powered_on(vm) -> bool:
    return vm.summary.runtime.powerState == \
        vim.VirtualMachinePowerState.poweredOn


class VMwareInstanceDirectory(InstanceDirectory):
    """The powered on virtual machines of a vSphere inventory.

    The machines are selected by the tags_environment and tags_role extra
    configuration options. The local instance is the one whose name is
    part of the configured VM name.
    """

    def __init__(self, provider_config: Dict[str, Any]) -> None:
        InstanceDirectory.__init__(self, provider_config)
        self.host = provider_config["host"]
        self.port = provider_config.get("port", VSPHERE_DEFAULT_PORT)
        self.username = provider_config["username"]
        self.password = provider_config["password"]
        self.insecure_skip_verify = provider_config.get(
            "insecure_skip_verify", False)
        self.max_api_attempts = provider_config.get(
            "max_api_attempts", VSPHERE_DEFAULT_MAX_API_ATTEMPTS)
        self.timeout = provider_config.get(
            "timeout", ETCD_BOOTSTRAP_REQUEST_TIMEOUT)
        self.vm_name = provider_config["vm_name"]
        self.environment = provider_config["environment"]
        self.role = provider_config["role"]
        self._instances = None

    def list_instances(self) -> List[Instance]:
        if self._instances is None:
            self._instances = self._find_all_instances_with_retries()
        return self._instances

    def get_local_instance(self) -> Instance:
        for instance in self.list_instances():
            if instance.name in self.vm_name:
                return instance
        raise InstanceDirectoryError(
            "Unable to find VM instance {}".format(self.vm_name))

    def _connect(self):
        if self.insecure_skip_verify:
            ssl_context = ssl._create_unverified_context()
        else:
            ssl_context = ssl.create_default_context()
        return SmartConnect(
            host=self.host, user=self.username, pwd=self.password,
            port=int(self.port), sslContext=ssl_context,
            httpConnectionTimeout=self.timeout)

    def _find_all_instances_with_retries(self):
        try_count = 0
        while True:
            try:
                return self._find_all_instances()
            except OSError as e:
                # Temporary network errors talking to the SOAP API
                try_count += 1
                if try_count >= self.max_api_attempts:
                    raise InstanceDirectoryError(
                        "Unable to list the VMs of {} after {} attempts: "
                        "{}".format(self.host, try_count, e)) from e
                logger.warning("Caught a network error: {}. Retrying.".format(e))
                time.sleep(VSPHERE_RETRY_BACKOFF_S)
            except vmodl.MethodFault as e:
                raise InstanceDirectoryError(
                    "Unable to list the VMs of {}: {}".format(
                        self.host, e.msg)) from e

    def _find_all_instances(self):
        si = self._connect()
        try:
            content = si.RetrieveContent()
            view = content.viewManager.CreateContainerView(
                content.rootFolder, [vim.VirtualMachine], True)
            try:
                instances = []
                for vm in view.view:
                    if not matches_tag(vm, TAG_ENVIRONMENT, self.environment):
                        continue
                    if not matches_tag(vm, TAG_ROLE, self.role):
                        continue
                    if not is_powered_on(vm):
                        continue
                    instances.append(Instance(
                        name=vm.config.name,
                        endpoint=vm.summary.guest.ipAddress))
                return instances
            finally:
                view.Destroy()
        finally:
            Disconnect(si)
