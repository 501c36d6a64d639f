import logging
import os
import sys

import click

from etcdbootstrap import __version__
from etcdbootstrap.core._private import constants
from etcdbootstrap.core._private import logging_utils
from etcdbootstrap.core._private.etcd.tls import TLSConfig
from etcdbootstrap.core._private.providers import _get_instance_directory, \
    _get_registration_provider
from etcdbootstrap.core._private.utils import EtcdBootstrapError
from etcdbootstrap.core.bootstrapper import Bootstrapper
from etcdbootstrap.scripts.utils import NaturalOrderGroup, check_required_option

logger = logging.getLogger(__name__)


@click.group(cls=NaturalOrderGroup)
@click.option(
    "--logging-level",
    required=False,
    default=constants.LOGGER_LEVEL_INFO,
    type=click.Choice(constants.LOGGER_LEVEL_CHOICES, case_sensitive=False),
    help=constants.LOGGER_LEVEL_HELP)
@click.option(
    "--logging-format",
    required=False,
    default=constants.LOGGER_FORMAT,
    type=str,
    help=constants.LOGGER_FORMAT_HELP)
@click.option(
    "--output-file",
    "-o",
    required=False,
    default=constants.ETCD_BOOTSTRAP_DEFAULT_OUTPUT_FILE,
    type=str,
    help="Location of the file to write the etcd environment variables to.")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, logging_level, logging_format, output_file):
    logging_utils.setup_logger(logging_level, logging_format)
    ctx.ensure_object(dict)
    ctx.obj["output_file"] = output_file


def _bootstrap(output_file, directory_config, registration_config,
               tls_config=None):
    try:
        instance_directory = _get_instance_directory(directory_config)
        bootstrapper = Bootstrapper(instance_directory, tls_config=tls_config)
        bootstrapper.generate_etcd_flags_file(output_file)

        registration_provider = _get_registration_provider(registration_config)
        registration_provider.update(instance_directory.list_instances())
    except EtcdBootstrapError as e:
        logger.error("Failed to bootstrap etcd: {}".format(e))
        sys.exit(1)


def _get_aws_directory_config(instance_lookup_method, srv_domain_name,
                              srv_service):
    if instance_lookup_method == "asg":
        logger.info("Using ASG for looking up cluster instances")
        return {"type": "aws"}

    logger.info("Using SRV record for looking up cluster instances")
    check_required_option(srv_domain_name, "--srv-domain-name")
    check_required_option(srv_service, "--srv-service")
    from etcdbootstrap.providers._private.aws.utils import \
        get_instance_identity_document
    return {
        "type": "srv",
        "domain_name": srv_domain_name,
        "service": srv_service,
        # Assumes the AWS private IP is the endpoint of the SRV target
        "local_ip": get_instance_identity_document()["privateIp"],
    }


def _get_aws_registration_config(registration_provider, r53_zone_id,
                                 dns_hostname, record_per_member,
                                 lb_target_group_name):
    if registration_provider == "route53":
        check_required_option(r53_zone_id, "--r53-zone-id")
        check_required_option(dns_hostname, "--dns-hostname")
        logger.info("Using route53 cloud registration provider")
        return {
            "type": "route53",
            "zone_id": r53_zone_id,
            "hostname": dns_hostname,
            "record_per_member": record_per_member,
        }
    if registration_provider == "lb":
        check_required_option(lb_target_group_name, "--lb-target-group-name")
        logger.info("Using loadbalancer target group cloud registration provider")
        return {
            "type": "lb",
            "target_group_name": lb_target_group_name,
        }
    logger.info("Using noop cloud registration provider")
    return {"type": "noop"}


@cli.command()
@click.option(
    "--instance-lookup-method",
    required=False,
    default="asg",
    type=click.Choice(["asg", "srv"]),
    help="Method for looking up instances in the cluster.")
@click.option(
    "--srv-domain-name",
    required=False,
    type=str,
    help="Domain name to use for --instance-lookup-method=srv.")
@click.option(
    "--srv-service",
    required=False,
    default="etcd-bootstrap",
    type=str,
    help="Service to use for --instance-lookup-method=srv.")
@click.option(
    "--registration-provider",
    "-r",
    required=False,
    default="noop",
    type=click.Choice(["noop", "route53", "lb"]),
    help="Automatic registration provider to use.")
@click.option(
    "--r53-zone-id",
    required=False,
    type=str,
    help="Zone id for automatic registration for --registration-provider=route53.")
@click.option(
    "--dns-hostname",
    required=False,
    type=str,
    help="Hostname to set to the etcd cluster when --registration-provider=route53.")
@click.option(
    "--record-per-member",
    is_flag=True,
    default=False,
    help="Also create a record for each member when --registration-provider=route53.")
@click.option(
    "--lb-target-group-name",
    required=False,
    type=str,
    help="Loadbalancer target group name to use when --registration-provider=lb.")
@click.option(
    "--enable-tls",
    is_flag=True,
    default=False,
    help="Enable TLS for the etcd client and peer traffic.")
@click.option(
    "--tls-client-ca", required=False, type=str, help="Path to client CA.")
@click.option(
    "--tls-client-cert", required=False, type=str,
    help="Path to client certificate.")
@click.option(
    "--tls-client-key", required=False, type=str, help="Path to client key.")
@click.option(
    "--tls-peer-ca", required=False, type=str, help="Path to peer CA.")
@click.option(
    "--tls-peer-cert", required=False, type=str,
    help="Path to peer certificate.")
@click.option(
    "--tls-peer-key", required=False, type=str, help="Path to peer key.")
@click.pass_context
def aws(ctx, instance_lookup_method, srv_domain_name, srv_service,
        registration_provider, r53_zone_id, dns_hostname, record_per_member,
        lb_target_group_name, enable_tls, tls_client_ca, tls_client_cert,
        tls_client_key, tls_peer_ca, tls_peer_cert, tls_peer_key):
    """Generate the config for an AWS etcd cluster."""
    registration_config = _get_aws_registration_config(
        registration_provider, r53_zone_id, dns_hostname, record_per_member,
        lb_target_group_name)
    try:
        tls_config = None
        if enable_tls:
            tls_config = TLSConfig(
                tls_client_ca, tls_client_cert, tls_client_key,
                tls_peer_ca, tls_peer_cert, tls_peer_key)
        directory_config = _get_aws_directory_config(
            instance_lookup_method, srv_domain_name, srv_service)
    except EtcdBootstrapError as e:
        logger.error("Failed to bootstrap etcd: {}".format(e))
        sys.exit(1)

    _bootstrap(ctx.obj["output_file"], directory_config,
               registration_config, tls_config)


@cli.command()
@click.option(
    "--project-id",
    required=True,
    type=str,
    help="Project ID of the GCP project the etcd instances run in.")
@click.option(
    "--environment",
    required=True,
    type=str,
    help="Value of the 'environment' label to filter the instances by.")
@click.option(
    "--role",
    required=True,
    type=str,
    help="Value of the 'role' label to filter the instances by.")
@click.option(
    "--registration-provider",
    "-r",
    required=False,
    default="noop",
    type=click.Choice(["noop", "dns"]),
    help="Automatic registration provider to use.")
@click.option(
    "--dns-zone",
    required=False,
    type=str,
    help="Cloud DNS managed zone to use when --registration-provider=dns.")
@click.option(
    "--dns-hostname",
    required=False,
    type=str,
    help="Hostname to set to the etcd cluster when --registration-provider=dns.")
@click.pass_context
def gcp(ctx, project_id, environment, role, registration_provider, dns_zone,
        dns_hostname):
    """Generate the config for a GCP etcd cluster."""
    check_required_option(project_id, "--project-id")
    check_required_option(environment, "--environment")
    check_required_option(role, "--role")

    registration_config = {"type": "noop"}
    if registration_provider == "dns":
        check_required_option(dns_zone, "--dns-zone")
        check_required_option(dns_hostname, "--dns-hostname")
        logger.info("Using Cloud DNS registration provider")
        registration_config = {
            "type": "gcp_dns",
            "project_id": project_id,
            "managed_zone": dns_zone,
            "hostname": dns_hostname,
        }

    directory_config = {
        "type": "gcp",
        "project_id": project_id,
        "environment": environment,
        "role": role,
    }
    _bootstrap(ctx.obj["output_file"], directory_config, registration_config)


@cli.command()
@click.option(
    "--vsphere-username",
    required=False,
    type=str,
    help="Username for vSphere API.")
@click.option(
    "--vsphere-host",
    required=False,
    type=str,
    help="Host address for vSphere API.")
@click.option(
    "--vsphere-port",
    required=False,
    default=443,
    type=int,
    help="Port for vSphere API.")
@click.option(
    "--insecure-skip-verify",
    is_flag=True,
    default=False,
    help="Skip SSL verification when communicating with the vSphere host.")
@click.option(
    "--max-api-attempts",
    required=False,
    default=3,
    type=int,
    help="Number of attempts to make against the vSphere SOAP API "
         "(in case of temporary failure).")
@click.option(
    "--vm-name",
    required=False,
    type=str,
    help="Node name in vSphere of this VM.")
@click.option(
    "--environment",
    required=False,
    type=str,
    help="Value of the 'tags_environment' extra configuration option "
         "in vSphere to filter nodes by.")
@click.option(
    "--role",
    required=False,
    type=str,
    help="Value of the 'tags_role' extra configuration option "
         "in vSphere to filter nodes by.")
@click.pass_context
def vmware(ctx, vsphere_username, vsphere_host, vsphere_port,
           insecure_skip_verify, max_api_attempts, vm_name, environment, role):
    """Generate the config for a VMware etcd cluster.

    The vSphere password is read from the VSPHERE_PASSWORD environment variable.
    """
    vsphere_password = os.environ.get(constants.VSPHERE_PASSWORD_ENV)
    check_required_option(vsphere_username, "--vsphere-username")
    check_required_option(
        vsphere_password, constants.VSPHERE_PASSWORD_ENV)
    check_required_option(vsphere_host, "--vsphere-host")
    check_required_option(vm_name, "--vm-name")
    check_required_option(environment, "--environment")
    check_required_option(role, "--role")

    directory_config = {
        "type": "vmware",
        "host": vsphere_host,
        "port": vsphere_port,
        "username": vsphere_username,
        "password": vsphere_password,
        "insecure_skip_verify": insecure_skip_verify,
        "max_api_attempts": max_api_attempts,
        "vm_name": vm_name,
        "environment": environment,
        "role": role,
    }
    _bootstrap(ctx.obj["output_file"], directory_config, {"type": "noop"})


def main():
    return cli()


if __name__ == "__main__":
    main()
