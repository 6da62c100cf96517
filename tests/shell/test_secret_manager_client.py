"""Tests for the Secret Manager client.

The Google client is replaced with a mock.
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from quakewatch.shell.secret_manager_client import (
    SecretManagerClient,
    SecretManagerConfig,
)


@pytest.fixture
def mock_gcp():
    client = MagicMock()
    client.access_secret_version.return_value.payload.data = b"s3cret"
    return client


@pytest.fixture
def client(mock_gcp):
    client = SecretManagerClient(SecretManagerConfig(project_id="proj"))
    client._client = mock_gcp
    return client


class TestGetSecret:
    """Tests for get_secret()."""

    def test_fetches_latest_version(self, client, mock_gcp):
        assert client.get_secret("slack-webhook") == "s3cret"
        mock_gcp.access_secret_version.assert_called_once_with(
            request={"name": "projects/proj/secrets/slack-webhook/versions/latest"}
        )

    def test_no_project(self, mock_gcp):
        client = SecretManagerClient()
        client._client = mock_gcp

        assert client.get_secret("x") is None
        mock_gcp.access_secret_version.assert_not_called()

    def test_error_returns_none(self, client, mock_gcp):
        mock_gcp.access_secret_version.side_effect = Exception("not found")
        assert client.get_secret("missing") is None


class TestResolve:
    """Tests for resolve()."""

    def test_plain_value(self, client):
        assert client.resolve("https://example.com") == "https://example.com"

    def test_secret_placeholder(self, client):
        assert client.resolve("${secret:slack-webhook}") == "s3cret"

    def test_unresolved_secret_keeps_placeholder(self, client, mock_gcp):
        mock_gcp.access_secret_version.side_effect = Exception("denied")
        assert client.resolve("${secret:x}") == "${secret:x}"

    def test_env_placeholder(self, client):
        with patch.dict(os.environ, {"WEBHOOK": "https://hooks.slack.com/env"}):
            assert client.resolve("${WEBHOOK}") == "https://hooks.slack.com/env"

    def test_missing_env_keeps_placeholder(self, client):
        with patch.dict(os.environ, {}, clear=True):
            assert client.resolve("${WEBHOOK}") == "${WEBHOOK}"
