"""Unit tests for AWS client and adapter availability zone lookups."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from kopsdeployer.adapters.aws_adapter import AWSAdapter
from kopsdeployer.clients.aws_client import AWSClient
from kopsdeployer.interfaces.exceptions import ComputeProviderError


class TestAWSClient:
    """Tests for AWSClient."""

    def test_client_bound_to_region(self) -> None:
        """Test the EC2 client is created for the requested region."""
        with patch("boto3.Session") as mock_session:
            client = AWSClient(region="eu-west-2")

        mock_session.assert_called_once_with(region_name="eu-west-2")
        assert client.ec2 is mock_session.return_value.client.return_value
        assert mock_session.return_value.client.call_args.args == ("ec2",)

    def test_client_with_profile(self) -> None:
        """Test profiles are passed to the session."""
        with patch("boto3.Session") as mock_session:
            AWSClient(region="us-east-1", profile="e2e")

        mock_session.assert_called_once_with(profile_name="e2e", region_name="us-east-1")

    def test_describe_availability_zones(self) -> None:
        """Test zone names are extracted from the response."""
        session = MagicMock()
        session.client.return_value.describe_availability_zones.return_value = {
            "AvailabilityZones": [
                {"ZoneName": "us-west-2a", "State": "available"},
                {"ZoneName": "us-west-2b", "State": "available"},
            ]
        }

        zones = AWSClient(region="us-west-2", session=session).describe_availability_zones()

        assert zones == ["us-west-2a", "us-west-2b"]

    def test_client_error_is_not_retried(self) -> None:
        """Test API rejections are raised immediately."""
        session = MagicMock()
        ec2 = session.client.return_value
        ec2.describe_availability_zones.side_effect = ClientError(
            {"Error": {"Code": "UnauthorizedOperation", "Message": "denied"}},
            "DescribeAvailabilityZones",
        )

        with pytest.raises(ClientError):
            AWSClient(region="us-west-2", session=session).describe_availability_zones()

        assert ec2.describe_availability_zones.call_count == 1

    def test_connection_errors_are_retried(self) -> None:
        """Test transport errors are retried before giving up."""
        session = MagicMock()
        ec2 = session.client.return_value
        ec2.describe_availability_zones.side_effect = [
            EndpointConnectionError(endpoint_url="https://ec2.us-west-2.amazonaws.com"),
            {"AvailabilityZones": [{"ZoneName": "us-west-2c"}]},
        ]
        client = AWSClient(region="us-west-2", session=session)

        with patch("time.sleep"):
            zones = client.describe_availability_zones()

        assert zones == ["us-west-2c"]
        assert ec2.describe_availability_zones.call_count == 2


class TestAWSAdapter:
    """Tests for AWSAdapter."""

    @patch("kopsdeployer.adapters.aws_adapter.AWSClient")
    def test_list_availability_zones(self, mock_client_class: MagicMock) -> None:
        """Test a region-bound client answers the query."""
        mock_client_class.return_value.describe_availability_zones.return_value = [
            "ca-central-1a",
            "ca-central-1b",
        ]

        zones = AWSAdapter(profile="e2e").list_availability_zones("ca-central-1")

        assert zones == ["ca-central-1a", "ca-central-1b"]
        mock_client_class.assert_called_once_with(region="ca-central-1", profile="e2e")

    @patch("kopsdeployer.adapters.aws_adapter.AWSClient")
    def test_api_error_is_wrapped(self, mock_client_class: MagicMock) -> None:
        """Test AWS errors become ComputeProviderError naming the region."""
        mock_client_class.return_value.describe_availability_zones.side_effect = ClientError(
            {"Error": {"Code": "OptInRequired", "Message": "not enabled"}},
            "DescribeAvailabilityZones",
        )

        with pytest.raises(ComputeProviderError) as exc_info:
            AWSAdapter().list_availability_zones("ap-south-1")

        assert "DescribeAvailabilityZones" in str(exc_info.value)
        assert "ap-south-1" in str(exc_info.value)
