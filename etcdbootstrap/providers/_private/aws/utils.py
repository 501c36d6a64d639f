import logging
from functools import lru_cache

import boto3
import requests
from botocore.config import Config

from etcdbootstrap.core._private.constants import env_integer, \
    ETCD_BOOTSTRAP_REQUEST_TIMEOUT
from etcdbootstrap.core._private.utils import InstanceDirectoryError

logger = logging.getLogger(__name__)

# Max number of retries to AWS (default is 5, time increases exponentially)
BOTO_MAX_RETRIES = env_integer("BOTO_MAX_RETRIES", 12)

AWS_METADATA_URL = "http://169.254.169.254/latest"
AWS_METADATA_TOKEN_TTL_SECONDS = 300
AWS_IDENTITY_DOCUMENT_PATH = "/dynamic/instance-identity/document"


def get_boto_error_code(exc):
    error_code = None
    error_info = None
    if hasattr(exc, "response"):
        error_info = exc.response.get("Error", None)
    if error_info is not None:
        error_code = error_info.get("Code", None)

    return error_code


@lru_cache()
def client_cache(name, region, max_retries=BOTO_MAX_RETRIES):
    """Return the boto3 client of a service, shared for the whole run."""
    logger.debug("Creating AWS client `{}` in `{}`".format(name, region))
    return boto3.client(
        name, region_name=region,
        config=Config(
            connect_timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT,
            read_timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT,
            retries={"max_attempts": max_retries}))


def _make_client(name, provider_config, region=None):
    return client_cache(name, region or provider_config["region"])


def get_instance_identity_document(timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT):
    """Read the identity document of this instance from the EC2 metadata service.

    The session token of IMDSv2 is requested first and sent along.
    """
    try:
        token_response = requests.put(
            AWS_METADATA_URL + "/api/token",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": str(
                AWS_METADATA_TOKEN_TTL_SECONDS)},
            timeout=timeout)
        token_response.raise_for_status()
        response = requests.get(
            AWS_METADATA_URL + AWS_IDENTITY_DOCUMENT_PATH,
            headers={"X-aws-ec2-metadata-token": token_response.text},
            timeout=timeout)
        response.raise_for_status()
        return response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise InstanceDirectoryError(
            "Failed to get AWS local instance data: {}".format(e)) from e
