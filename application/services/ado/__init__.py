"""
Azure DevOps Service Package

Commit side of the sync: branch management, existing path listing and
atomic pushes with an optimistic-concurrency precondition.
"""

from application.services.ado.ado_service import AdoGitService
from application.services.ado.url_parser import AdoRepositoryInfo, parse_ado_url

__all__ = ["AdoGitService", "AdoRepositoryInfo", "parse_ado_url"]
