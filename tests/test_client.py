"""Tests for the ECR registry client."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoRegionError

from ecr_search.registry.client import (
    DESCRIBE_BATCH_LIMIT,
    RegistryClient,
    RegistryError,
    SessionError,
)


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class TestClientInit:
    """Test session and client construction."""

    @patch("ecr_search.registry.client.boto3.Session")
    def test_region_is_honored(self, mock_session_cls):
        RegistryClient("eu-west-3")
        mock_session_cls.return_value.client.assert_called_once_with(
            "ecr", region_name="eu-west-3"
        )

    @patch("ecr_search.registry.client.boto3.Session")
    def test_session_failure(self, mock_session_cls):
        mock_session_cls.return_value.client.side_effect = NoRegionError()
        with pytest.raises(SessionError) as exc_info:
            RegistryClient("")
        assert exc_info.value.operation == "CreateClient"
        assert isinstance(exc_info.value, RegistryError)


class TestListImageIds:
    """Test the ListImages wrapper."""

    def test_single_bounded_call(self):
        ecr = MagicMock()
        ecr.list_images.return_value = {
            "imageIds": [{"imageTag": "latest", "imageDigest": "sha256:a"}],
            "nextToken": "more",
        }
        client = RegistryClient("us-east-1", client=ecr)

        ids = client.list_image_ids("app", max_results=1000, tag_status="TAGGED")

        assert ids == [{"imageTag": "latest", "imageDigest": "sha256:a"}]
        ecr.list_images.assert_called_once_with(
            repositoryName="app",
            maxResults=1000,
            filter={"tagStatus": "TAGGED"},
        )

    def test_no_status_filter(self):
        ecr = MagicMock()
        ecr.list_images.return_value = {"imageIds": []}
        client = RegistryClient("us-east-1", client=ecr)

        assert client.list_image_ids("app") == []
        kwargs = ecr.list_images.call_args.kwargs
        assert "filter" not in kwargs

    def test_registry_id_is_sent(self):
        ecr = MagicMock()
        ecr.list_images.return_value = {"imageIds": []}
        client = RegistryClient("us-east-1", registry_id="123456789012", client=ecr)

        client.list_image_ids("app")
        assert ecr.list_images.call_args.kwargs["registryId"] == "123456789012"

    def test_paginate_uses_botocore_paginator(self):
        ecr = MagicMock()
        ecr.get_paginator.return_value.paginate.return_value = iter(
            [
                {"imageIds": [{"imageTag": "a"}], "nextToken": "t1"},
                {"imageIds": [{"imageTag": "b"}], "nextToken": "t2"},
                {"imageIds": [{"imageTag": "c"}]},
            ]
        )
        client = RegistryClient("us-east-1", registry_id="123456789012", client=ecr)

        ids = client.list_image_ids("app", tag_status="TAGGED", paginate=True)

        assert [i["imageTag"] for i in ids] == ["a", "b", "c"]
        ecr.get_paginator.assert_called_once_with("list_images")
        ecr.get_paginator.return_value.paginate.assert_called_once_with(
            repositoryName="app",
            filter={"tagStatus": "TAGGED"},
            registryId="123456789012",
            PaginationConfig={"PageSize": 1000},
        )
        ecr.list_images.assert_not_called()

    def test_paginate_error_mid_listing(self):
        def pages():
            yield {"imageIds": [{"imageTag": "a"}], "nextToken": "t1"}
            raise _client_error("ThrottlingException", "ListImages")

        ecr = MagicMock()
        ecr.get_paginator.return_value.paginate.return_value = pages()
        client = RegistryClient("us-east-1", client=ecr)

        with pytest.raises(RegistryError) as exc_info:
            client.list_image_ids("app", paginate=True)
        assert exc_info.value.operation == "ListImages"
        assert "ThrottlingException" in str(exc_info.value)

    def test_client_error(self):
        ecr = MagicMock()
        ecr.list_images.side_effect = _client_error(
            "RepositoryNotFoundException", "ListImages"
        )
        client = RegistryClient("us-west-2", client=ecr)

        with pytest.raises(RegistryError) as exc_info:
            client.list_image_ids("missing")

        err = exc_info.value
        assert err.operation == "ListImages"
        assert err.repository == "missing"
        assert err.region == "us-west-2"
        assert "RepositoryNotFoundException" in str(err)

    def test_connection_error(self):
        ecr = MagicMock()
        ecr.list_images.side_effect = EndpointConnectionError(
            endpoint_url="https://api.ecr.us-east-1.amazonaws.com"
        )
        client = RegistryClient("us-east-1", client=ecr)

        with pytest.raises(RegistryError, match="ListImages failed"):
            client.list_image_ids("app")


class TestDescribeImages:
    """Test the DescribeImages wrapper."""

    def test_empty_batch_makes_no_call(self):
        ecr = MagicMock()
        client = RegistryClient("us-east-1", client=ecr)

        assert client.describe_images("app", []) == ([], [])
        ecr.describe_images.assert_not_called()

    def test_unchunked_batch_above_limit(self):
        """Without a chunk size every identifier goes out in one call."""
        ecr = MagicMock()
        ecr.describe_images.return_value = {"imageDetails": []}
        client = RegistryClient("us-east-1", client=ecr)
        ids = [{"imageTag": f"t{n}"} for n in range(DESCRIBE_BATCH_LIMIT + 50)]

        client.describe_images("app", ids)

        ecr.describe_images.assert_called_once()
        assert len(ecr.describe_images.call_args.kwargs["imageIds"]) == 150

    def test_chunked_batch(self):
        ecr = MagicMock()
        ecr.describe_images.side_effect = [
            {"imageDetails": [{"imageDigest": "sha256:a"}]},
            {
                "imageDetails": [{"imageDigest": "sha256:b"}],
                "failures": [{"imageId": {"imageTag": "gone"}}],
            },
        ]
        client = RegistryClient("us-east-1", client=ecr)
        ids = [{"imageTag": f"t{n}"} for n in range(150)]

        details, failures = client.describe_images(
            "app", ids, chunk_size=DESCRIBE_BATCH_LIMIT
        )

        assert ecr.describe_images.call_count == 2
        sizes = [len(c.kwargs["imageIds"]) for c in ecr.describe_images.call_args_list]
        assert sizes == [100, 50]
        assert [d["imageDigest"] for d in details] == ["sha256:a", "sha256:b"]
        assert failures == [{"imageId": {"imageTag": "gone"}}]

    def test_describe_error(self):
        ecr = MagicMock()
        ecr.describe_images.side_effect = _client_error(
            "InvalidParameterException", "DescribeImages"
        )
        client = RegistryClient("us-east-1", client=ecr)

        with pytest.raises(RegistryError) as exc_info:
            client.describe_images("app", [{"imageTag": "latest"}])
        assert exc_info.value.operation == "DescribeImages"
