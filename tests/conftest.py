from __future__ import annotations

import pytest

from s3context.common.config import (
    AWS_ENDPOINT,
    S3_ACCESS_KEY_ID,
    S3_BUCKET,
    S3_REGION,
    S3_SECRET_ACCESS_KEY,
    clear_properties,
    set_property,
)

CONFIG_KEYS = (
    S3_ACCESS_KEY_ID,
    S3_SECRET_ACCESS_KEY,
    S3_BUCKET,
    S3_REGION,
    AWS_ENDPOINT,
)

TEST_BUCKET = "testbucket2"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep host environment, properties and any .env file out of tests."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_properties()
    yield
    clear_properties()


@pytest.fixture()
def s3_properties():
    set_property(S3_ACCESS_KEY_ID, "foo")
    set_property(S3_SECRET_ACCESS_KEY, "bar")
    set_property(S3_BUCKET, TEST_BUCKET)
    set_property(S3_REGION, "us-west-2")
    set_property(AWS_ENDPOINT, "http://localhost:8001")
