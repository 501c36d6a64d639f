import pytest

from etcdbootstrap.providers._private.aws.utils import client_cache

from botocore.stub import Stubber

AWS_REGION = "us-west-2"


@pytest.fixture()
def autoscaling_client_stub():
    client = client_cache("autoscaling", AWS_REGION)
    with Stubber(client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture()
def ec2_client_stub():
    client = client_cache("ec2", AWS_REGION)
    with Stubber(client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture()
def route53_client_stub():
    client = client_cache("route53", AWS_REGION)
    with Stubber(client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture()
def elbv2_client_stub():
    client = client_cache("elbv2", AWS_REGION)
    with Stubber(client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()
