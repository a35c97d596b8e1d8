"""
Sandbox Fixtures for Integration Tests

Provides configured clients for testing against the Visa sandbox.
Requires the VISA_API_* environment variables to be set.
"""

import os

import pytest

from visa_sdk import AsyncVisaClient, ClientConfig, VisaClient
from visa_sdk.models import ENV_VARS, REQUIRED_CONFIG_FIELDS


@pytest.fixture(scope="session")
def sandbox_config():
    """
    Create sandbox configuration from environment variables.

    Skips tests if any required VISA_API_* variable is not set.
    """
    missing = [ENV_VARS[name] for name in REQUIRED_CONFIG_FIELDS if not os.getenv(ENV_VARS[name])]
    if missing:
        pytest.skip(f"Sandbox environment not configured: {', '.join(missing)}")

    return ClientConfig.from_env()


@pytest.fixture(scope="session")
def sandbox_client(sandbox_config):
    """Synchronous client against the sandbox"""
    return VisaClient(sandbox_config)


@pytest.fixture(scope="session")
def sandbox_async_client(sandbox_config):
    """Asynchronous client against the sandbox"""
    return AsyncVisaClient(sandbox_config)


@pytest.fixture
def sandbox_mle_client(sandbox_config):
    """
    Client with MLE initialized from VISA_API_MLE_KEY_ID and
    VISA_API_MLE_SERVER_KEY (PEM).
    """
    key_id = os.getenv("VISA_API_MLE_KEY_ID")
    server_key = os.getenv("VISA_API_MLE_SERVER_KEY")
    if not key_id or not server_key:
        pytest.skip("VISA_API_MLE_KEY_ID / VISA_API_MLE_SERVER_KEY not set")

    client = VisaClient(sandbox_config)
    client.init_mle(key_id, server_key, os.getenv("VISA_API_MLE_PRIVATE_KEY"))
    return client
