import logging
import os
import re
import io

from itertools import chain

logger = logging.getLogger(__name__)

ROOT_DIR = os.path.dirname(os.path.abspath(__file__))

MINIMUM_SUPPORTED_PYTHON_VERSION = "3.8"


def find_version(*filepath):
    # Extract version information from filepath
    with open(os.path.join(ROOT_DIR, *filepath)) as fp:
        version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                                  fp.read(), re.M)
        if version_match:
            return version_match.group(1)
        raise RuntimeError("Unable to find version string.")


class SetupSpec:
    def __init__(self, name: str, description: str):
        self.name: str = name
        self.version = find_version("etcdbootstrap", "__init__.py")
        self.description: str = description
        self.install_requires: list = []
        self.extras: dict = {}

    def get_packages(self):
        import setuptools
        return setuptools.find_packages(include=["etcdbootstrap", "etcdbootstrap.*"])


# "etcd-bootstrap" primary wheel package.
setup_spec = SetupSpec(
    "etcd-bootstrap",
    "etcd-bootstrap: discover the nodes of an etcd cluster and generate the etcd startup flags")

setup_spec.extras = {
    "aws": [
        "boto3",
        "botocore",
    ],
    "gcp": [
        "google-api-python-client",
        "google-auth",
        "google-auth-httplib2",
        "httplib2",
    ],
    "vmware": [
        "pyvmomi",
    ],
    "srv": [
        "dnslib",
    ],
}

setup_spec.extras["all"] = list(
        set(chain.from_iterable(setup_spec.extras.values())))

setup_spec.extras["test"] = list(
        set(chain(setup_spec.extras["all"], ["pytest"])))

# These are the main dependencies for users of etcd-bootstrap. This list
# should be carefully curated.

setup_spec.install_requires = [
    "click >= 7.0",
    "requests",
]


if __name__ == "__main__":
    import setuptools

    setuptools.setup(
        name=setup_spec.name,
        version=setup_spec.version,
        description=setup_spec.description,
        long_description=io.open(
            os.path.join(ROOT_DIR, "README.md"), "r", encoding="utf-8").read(),
        long_description_content_type="text/markdown",
        keywords="etcd cluster bootstrap aws gcp vmware",
        classifiers=[
            f"Programming Language :: Python :: {MINIMUM_SUPPORTED_PYTHON_VERSION}",
        ],
        python_requires=f">={MINIMUM_SUPPORTED_PYTHON_VERSION}",
        packages=setup_spec.get_packages(),
        install_requires=setup_spec.install_requires,
        extras_require=setup_spec.extras,
        entry_points={
            "console_scripts": [
                "etcd-bootstrap=etcdbootstrap.scripts.scripts:main",
            ]
        },
        zip_safe=False,
        license="Apache 2.0")
