"""
Configuration module.

Loads environment variables (optionally from a .env file) and exposes the
defaults used by the Salesforce and Azure DevOps clients and the sync pipeline.
Per-sync settings live in application.models.sync_config.SyncConfig.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def get_env(key: str) -> str:
    """Get environment variable or raise exception if not found."""
    value = os.getenv(key)
    if value is None:
        raise Exception(f"{key} not found")
    return value


# Salesforce Metadata API
SALESFORCE_API_VERSION = os.getenv("SALESFORCE_API_VERSION", "60.0")
DEFAULT_PACKAGE_VERSION = os.getenv("DEFAULT_PACKAGE_VERSION", "58.0")
SALESFORCE_SESSION_COOKIE = os.getenv("SALESFORCE_SESSION_COOKIE", "sid")
RETRIEVE_POLL_INTERVAL = float(os.getenv("RETRIEVE_POLL_INTERVAL", "2"))

# Azure DevOps REST API
ADO_BASE_URL = os.getenv("ADO_BASE_URL", "https://dev.azure.com")
ADO_API_VERSION = os.getenv("ADO_API_VERSION", "7.0")
ADO_DEFAULT_SOURCE_BRANCH = os.getenv("ADO_DEFAULT_SOURCE_BRANCH", "main")

# HTTP behaviour
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "150"))
HTTP_CONNECT_TIMEOUT = float(os.getenv("HTTP_CONNECT_TIMEOUT", "60"))
# At least one attempt is always made
HTTP_MAX_ATTEMPTS = max(1, int(os.getenv("HTTP_MAX_ATTEMPTS", "3")))
HTTP_RETRY_BASE_DELAY = float(os.getenv("HTTP_RETRY_BASE_DELAY", "1"))

# Push retry on stale branch reference
MAX_PUSH_RETRIES = int(os.getenv("MAX_PUSH_RETRIES", "2"))
PUSH_RETRY_DELAY = float(os.getenv("PUSH_RETRY_DELAY", "1"))

# Sync defaults
DEFAULT_COMMIT_MESSAGE = os.getenv("DEFAULT_COMMIT_MESSAGE", "Salesforce Synced Changes")
DEFAULT_PACKAGE_XML_PATH = os.getenv("DEFAULT_PACKAGE_XML_PATH", "manifest/package.xml")
JOB_LOG_LIMIT = int(os.getenv("JOB_LOG_LIMIT", "1000"))
