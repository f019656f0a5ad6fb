"""
Azure DevOps repository URL parsing.

Handles the two URL shapes Azure DevOps shows for a git repository so a
single pasted link can fill in organization, project and repository.
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote

from common.exception.exceptions import ValidationError

logger = logging.getLogger(__name__)

_DEV_AZURE_PATTERN = re.compile(
    r"^https?://(?:[^@/]+@)?dev\.azure\.com/([^/]+)/([^/]+)/_git/([^/?#]+)"
)
_VISUALSTUDIO_PATTERN = re.compile(
    r"^https?://(?:[^@/]+@)?([^./]+)\.visualstudio\.com/(?:DefaultCollection/)?([^/]+)/_git/([^/?#]+)"
)


@dataclass
class AdoRepositoryInfo:
    """Information extracted from an Azure DevOps repository URL."""

    org: str
    project: str
    repo: str
    original_url: str

    def to_web_url(self) -> str:
        """Convert to the canonical dev.azure.com web URL.

        Returns:
            HTTPS URL (without authentication)
        """
        return (
            f"https://dev.azure.com/{quote(self.org, safe='')}/{quote(self.project, safe='')}"
            f"/_git/{quote(self.repo, safe='')}"
        )


def parse_ado_url(url: str) -> AdoRepositoryInfo:
    """
    Parse an Azure DevOps repository URL.

    Supports:
    - https://dev.azure.com/{org}/{project}/_git/{repo}
    - https://{org}.visualstudio.com/{project}/_git/{repo}
    - either form with a user@ prefix or a trailing .git

    Args:
        url: Repository URL

    Returns:
        AdoRepositoryInfo with decoded components

    Raises:
        ValidationError: If URL format is invalid
    """
    if not url or not url.strip():
        raise ValidationError("Repository URL cannot be empty")

    url_clean = url.strip().rstrip("/")
    if url_clean.endswith(".git"):
        url_clean = url_clean[: -len(".git")]

    for pattern in (_DEV_AZURE_PATTERN, _VISUALSTUDIO_PATTERN):
        match = pattern.match(url_clean)
        if match:
            org, project, repo = (unquote(part) for part in match.groups())
            logger.debug(f"Parsed Azure DevOps URL: org={org}, project={project}, repo={repo}")
            return AdoRepositoryInfo(org=org, project=project, repo=repo, original_url=url)

    raise ValidationError(
        f"Invalid Azure DevOps repository URL format: {url}. "
        f"Supported formats: https://dev.azure.com/org/project/_git/repo, "
        f"https://org.visualstudio.com/project/_git/repo"
    )
