import importlib
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def load_class(path):
    """Load a class at runtime given a full path.

    Example of the path: mypkg.mysubpkg.myclass
    """
    class_data = path.split(".")
    if len(class_data) < 2:
        raise ValueError(
            "You need to pass a valid path like mymodule.class")
    module_path = ".".join(class_data[:-1])
    class_str = class_data[-1]
    module = importlib.import_module(module_path)
    return getattr(module, class_str)


def _import_aws_instance_directory(provider_config):
    from etcdbootstrap.providers._private.aws.instance_directory import \
        AWSInstanceDirectory
    return AWSInstanceDirectory


def _import_srv_instance_directory(provider_config):
    from etcdbootstrap.providers._private.srv.instance_directory import \
        SRVInstanceDirectory
    return SRVInstanceDirectory


def _import_gcp_instance_directory(provider_config):
    from etcdbootstrap.providers._private.gcp.instance_directory import \
        GCPInstanceDirectory
    return GCPInstanceDirectory


def _import_vmware_instance_directory(provider_config):
    from etcdbootstrap.providers._private.vmware.instance_directory import \
        VMwareInstanceDirectory
    return VMwareInstanceDirectory


def _import_noop_registration(provider_config):
    from etcdbootstrap.providers._private.noop.registration_provider import \
        NoopRegistrationProvider
    return NoopRegistrationProvider


def _import_route53_registration(provider_config):
    from etcdbootstrap.providers._private.aws.route53 import \
        Route53RegistrationProvider
    return Route53RegistrationProvider


def _import_lb_registration(provider_config):
    from etcdbootstrap.providers._private.aws.lb_target_group import \
        LBTargetGroupRegistrationProvider
    return LBTargetGroupRegistrationProvider


def _import_gcp_dns_registration(provider_config):
    from etcdbootstrap.providers._private.gcp.cloud_dns import \
        CloudDNSRegistrationProvider
    return CloudDNSRegistrationProvider


def _import_external(provider_config):
    provider_cls = load_class(path=provider_config["provider_class"])
    return provider_cls


_INSTANCE_DIRECTORIES = {
    "aws": _import_aws_instance_directory,  # Instances of the auto scaling group
    "srv": _import_srv_instance_directory,  # Targets of a DNS SRV record
    "gcp": _import_gcp_instance_directory,
    "vmware": _import_vmware_instance_directory,
    "external": _import_external  # Import an external module
}

_REGISTRATION_PROVIDERS = {
    "noop": _import_noop_registration,
    "route53": _import_route53_registration,
    "lb": _import_lb_registration,
    "gcp_dns": _import_gcp_dns_registration,
    "external": _import_external
}


def _get_provider_cls(registry, kind, provider_config: Dict[str, Any]):
    importer = registry.get(provider_config["type"])
    if importer is None:
        raise NotImplementedError("Unsupported {}: {}".format(
            kind, provider_config["type"]))
    return importer(provider_config)


def _get_instance_directory(provider_config: Dict[str, Any]) -> Any:
    """Get the instantiated instance directory for a given provider config.

    Args:
        provider_config: the "type" key selects the directory, the other
            keys are passed to it as they are.

    Returns:
        InstanceDirectory
    """
    directory_cls = _get_provider_cls(
        _INSTANCE_DIRECTORIES, "instance directory", provider_config)
    return directory_cls(provider_config)


def _get_registration_provider(provider_config: Dict[str, Any]) -> Any:
    """Get the instantiated registration provider for a given provider config.

    Returns:
        RegistrationProvider
    """
    provider_cls = _get_provider_cls(
        _REGISTRATION_PROVIDERS, "registration provider", provider_config)
    return provider_cls(provider_config)
