import logging

import google.auth
import google_auth_httplib2
import httplib2
import requests
from googleapiclient import discovery

from etcdbootstrap.core._private.constants import ETCD_BOOTSTRAP_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

GCP_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

GCP_METADATA_URL = "http://metadata.google.internal/computeMetadata/v1/"
GCP_METADATA_HEADERS = {"Metadata-Flavor": "Google"}


def _get_authorized_http(timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT):
    """Return an HTTP transport signed with the application default credentials.

    httplib2 waits forever on a socket unless it is given a timeout.
    """
    credentials, project_id = google.auth.default(scopes=GCP_SCOPES)
    logger.debug("Using the application default credentials of {}".format(
        project_id))
    return google_auth_httplib2.AuthorizedHttp(
        credentials, http=httplib2.Http(timeout=timeout))


def _create_client(service, version):
    return discovery.build(
        service, version, http=_get_authorized_http(), cache_discovery=False)


def construct_compute_client():
    return _create_client("compute", "v1")


def construct_dns_client():
    return _create_client("dns", "v1")


def get_metadata(path, timeout=ETCD_BOOTSTRAP_REQUEST_TIMEOUT) -> str:
    """Read a value of this instance from the GCP metadata server."""
    response = requests.get(
        GCP_METADATA_URL + path, headers=GCP_METADATA_HEADERS, timeout=timeout)
    response.raise_for_status()
    return response.text.strip()
