"""Tests for S3 storage client."""

import io
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from s3context.common.config import S3Settings
from s3context.infra.storage.client import EMPTY_ETAG, StorageRequestFailed
from s3context.infra.storage.s3_client import S3StorageClient


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestBuildClient:
    """Test boto3 client construction from settings."""

    def test_standard_region_resolution_without_endpoint(self):
        settings = S3Settings(
            access_key_id="key", secret_access_key="secret", region="eu-central-1"
        )

        with patch("boto3.client") as boto_client:
            S3StorageClient.from_settings(settings)

        boto_client.assert_called_once()
        args, kwargs = boto_client.call_args
        assert args == ("s3",)
        assert "endpoint_url" not in kwargs
        assert kwargs["region_name"] == "eu-central-1"
        assert kwargs["aws_access_key_id"] == "key"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    def test_endpoint_override(self):
        settings = S3Settings(
            access_key_id="key",
            secret_access_key="secret",
            region="us-west-2",
            endpoint_url="http://localhost:8001",
        )

        with patch("boto3.client") as boto_client:
            S3StorageClient.from_settings(settings)

        kwargs = boto_client.call_args[1]
        assert kwargs["endpoint_url"] == "http://localhost:8001"
        assert kwargs["region_name"] == "us-west-2"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    def test_construction_does_not_contact_endpoint(self):
        settings = S3Settings(
            access_key_id="key",
            secret_access_key="secret",
            region="us-west-2",
            endpoint_url="http://127.0.0.1:1",
        )

        client = S3StorageClient.from_settings(settings)

        assert client.raw.meta.endpoint_url == "http://127.0.0.1:1"
        assert client.raw.meta.region_name == "us-west-2"


class TestS3StorageClient:
    """Test S3StorageClient operations against a mocked boto3 client."""

    @pytest.fixture
    def mock_s3(self):
        return MagicMock()

    @pytest.fixture
    def client(self, mock_s3):
        return S3StorageClient(client=mock_s3)

    def test_create_and_delete_bucket(self, client, mock_s3):
        client.create_bucket(bucket="test-bucket")
        client.delete_bucket(bucket="test-bucket")

        mock_s3.create_bucket.assert_called_once_with(Bucket="test-bucket")
        mock_s3.delete_bucket.assert_called_once_with(Bucket="test-bucket")

    def test_put_object_encodes_text(self, client, mock_s3):
        mock_s3.put_object.return_value = {"ETag": '"abc"'}

        etag = client.put_object(
            bucket="test-bucket", object_key="a.csv", content="contenü"
        )

        assert etag == "abc"
        mock_s3.put_object.assert_called_once_with(
            Bucket="test-bucket", Key="a.csv", Body="contenü".encode("utf-8")
        )

    def test_put_object_with_content_type(self, client, mock_s3):
        mock_s3.put_object.return_value = {}

        client.put_object(
            bucket="test-bucket",
            object_key="a.csv",
            content=b"raw",
            content_type="text/csv",
        )

        assert mock_s3.put_object.call_args[1]["ContentType"] == "text/csv"
        assert mock_s3.put_object.call_args[1]["Body"] == b"raw"

    def test_copy_object(self, client, mock_s3):
        mock_s3.copy_object.return_value = {"CopyObjectResult": {"ETag": '"e1"'}}

        etag = client.copy_object(
            source_bucket="src", source_key="a", dest_bucket="dst", dest_key="b"
        )

        assert etag == "e1"
        mock_s3.copy_object.assert_called_once_with(
            Bucket="dst", Key="b", CopySource={"Bucket": "src", "Key": "a"}
        )

    def test_get_object(self, client, mock_s3):
        modified = datetime(2024, 1, 1, tzinfo=timezone.utc)
        mock_s3.get_object.return_value = {
            "Body": io.BytesIO(b"contents"),
            "ContentLength": 8,
            "ETag": '"etag"',
            "ContentType": "text/plain",
            "LastModified": modified,
            "Metadata": {"owner": "me"},
        }

        result = client.get_object(bucket="test-bucket", object_key="a.txt")

        assert result.read() == b"contents"
        assert result.size == 8
        assert result.etag == "etag"
        assert result.content_type == "text/plain"
        assert result.last_modified == modified
        assert result.metadata == {"owner": "me"}

    def test_get_object_missing(self, client, mock_s3):
        error = _client_error("NoSuchKey", "GetObject")
        mock_s3.get_object.side_effect = error

        with pytest.raises(StorageRequestFailed) as exc_info:
            client.get_object(bucket="test-bucket", object_key="missing")

        assert exc_info.value.operation == "get_object"
        assert exc_info.value.cause is error

    def test_object_exists(self, client, mock_s3):
        mock_s3.head_object.return_value = {"ContentLength": 3}

        assert client.object_exists(bucket="test-bucket", object_key="a") is True
        mock_s3.head_object.assert_called_once_with(Bucket="test-bucket", Key="a")

    @pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
    def test_object_exists_missing(self, client, mock_s3, code):
        mock_s3.head_object.side_effect = _client_error(code)

        assert client.object_exists(bucket="test-bucket", object_key="a") is False

    def test_object_exists_propagates_other_errors(self, client, mock_s3):
        mock_s3.head_object.side_effect = _client_error("403")

        with pytest.raises(StorageRequestFailed, match="head_object failed"):
            client.object_exists(bucket="test-bucket", object_key="a")

    def test_delete_object(self, client, mock_s3):
        client.delete_object(bucket="test-bucket", object_key="test/key")

        mock_s3.delete_object.assert_called_once_with(
            Bucket="test-bucket", Key="test/key"
        )

    def test_delete_object_exception(self, client, mock_s3):
        mock_s3.delete_object.side_effect = Exception("S3 error")

        with pytest.raises(StorageRequestFailed, match="delete_object failed"):
            client.delete_object(bucket="test-bucket", object_key="test/key")

    def test_list_objects(self, client, mock_s3):
        mock_s3.list_objects.return_value = {
            "Contents": [
                {"Key": "f/b.csv", "ETag": '"123"', "Size": 7},
                {"Key": "f/a.csv", "ETag": f'"{EMPTY_ETAG}"', "Size": 0},
            ]
        }

        result = client.list_objects(bucket="test-bucket", prefix="f/")

        mock_s3.list_objects.assert_called_once_with(Bucket="test-bucket", Prefix="f/")
        assert [s.key for s in result] == ["f/b.csv", "f/a.csv"]
        assert result[0].etag == "123"
        assert result[0].size == 7
        assert result[1].is_empty

    def test_list_objects_without_prefix(self, client, mock_s3):
        mock_s3.list_objects.return_value = {"IsTruncated": False}

        assert client.list_objects(bucket="test-bucket") == []
        mock_s3.list_objects.assert_called_once_with(Bucket="test-bucket")

    def test_list_objects_first_page_only(self, client, mock_s3):
        mock_s3.list_objects.return_value = {
            "IsTruncated": True,
            "Contents": [{"Key": "a", "ETag": '"1"', "Size": 1}],
        }

        result = client.list_objects(bucket="test-bucket")

        assert [s.key for s in result] == ["a"]
        assert mock_s3.list_objects.call_count == 1

    def test_list_objects_exception(self, client, mock_s3):
        mock_s3.list_objects.side_effect = Exception("S3 error")

        with pytest.raises(StorageRequestFailed, match="list_objects failed"):
            client.list_objects(bucket="test-bucket")
