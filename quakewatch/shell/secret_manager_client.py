"""Secret Manager Client - Imperative Shell.

This module resolves configuration placeholders against Google Cloud
Secret Manager and the environment. All I/O is contained here.

Placeholder syntax:
    ${secret:name}   -> latest version of secret "name"
    ${ENV_VAR}       -> environment variable
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from google.cloud import secretmanager


logger = logging.getLogger(__name__)


SECRET_PREFIX = "secret:"


@dataclass
class SecretManagerConfig:
    """Configuration for Secret Manager client.

    Attributes:
        project_id: GCP project ID (None for default)
    """
    project_id: Optional[str] = None


class SecretManagerClient:
    """Client for reading secrets from Google Cloud Secret Manager.

    This is part of the imperative shell - it handles secret I/O.
    """

    def __init__(self, config: Optional[SecretManagerConfig] = None) -> None:
        """Initialize Secret Manager client.

        Args:
            config: Secret Manager configuration
        """
        self.config = config or SecretManagerConfig()
        self._client: Optional[secretmanager.SecretManagerServiceClient] = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy initialization of Secret Manager client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_secret(
        self,
        secret_name: str,
        version: str = "latest",
    ) -> Optional[str]:
        """Fetch a secret value from Secret Manager.

        This method performs I/O.

        Args:
            secret_name: Name of the secret (not the full resource path)
            version: Version of the secret (default: "latest")

        Returns:
            Secret value as string, or None if not found
        """
        project = self.config.project_id

        if not project:
            logger.error("No project ID configured for Secret Manager")
            return None

        name = f"projects/{project}/secrets/{secret_name}/versions/{version}"

        try:
            logger.info("Fetching secret: %s", secret_name)
            response = self.client.access_secret_version(request={"name": name})
            return response.payload.data.decode("UTF-8")

        except Exception as e:
            logger.error("Failed to fetch secret %s: %s", secret_name, str(e))
            return None

    def resolve(self, value: str) -> str:
        """Resolve a ${...} placeholder, returning the value unchanged if
        it is not a placeholder or cannot be resolved.

        Args:
            value: Raw configuration value

        Returns:
            Resolved value
        """
        if not (value.startswith("${") and value.endswith("}")):
            return value

        name = value[2:-1]

        if name.startswith(SECRET_PREFIX):
            secret = self.get_secret(name[len(SECRET_PREFIX):])
            if secret:
                return secret
            logger.warning("Secret %s could not be resolved", name)
            return value

        env_value = os.environ.get(name)
        if env_value:
            return env_value

        logger.warning("Environment variable %s not set", name)
        return value
