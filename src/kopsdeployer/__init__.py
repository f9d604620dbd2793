"""kops deployer for Kubernetes end-to-end testing.

Stand up, validate, inspect and tear down kops-managed clusters on GCE and AWS
on behalf of an e2e test harness.
"""

__version__ = "0.1.0"
__author__ = "Kubernetes Test Infrastructure"
__license__ = "Apache-2.0"
