#!/usr/bin/env python3
"""
Entry point script to run one Salesforce → Azure DevOps sync.

This script should be run from the project root directory:
    python run.py --cookies-file cookies.txt

Or with the virtual environment:
    source .venv/bin/activate && python run.py --template all-apex

Settings come from SF_ADO_* environment variables (or a .env file), see
application.models.sync_config.SyncConfig.from_env. Command line options
override them.

Environment variables:
    SF_SERVER_URL / SF_SESSION_ID: Stored Salesforce session (used before cookies)
    SYNC_LOG_FILE: Log file path (default: sync-log.log)
    SYNC_LOG_LEVEL: Root log level (default: INFO)
"""
import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

from application.models.sync_config import SyncConfig
from application.services.ado.url_parser import parse_ado_url
from application.services.salesforce.models.types import SalesforceSession, SessionCookie
from application.services.salesforce.salesforce_service import SalesforceService
from application.services.salesforce.session import load_cookies_from_file
from application.services.salesforce.templates import PACKAGE_TEMPLATES, get_template
from application.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    log_file = os.getenv("SYNC_LOG_FILE", "sync-log.log")
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logging.basicConfig(
        level=os.getenv("SYNC_LOG_LEVEL", "INFO").upper(),
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, mode="a"),
        ],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Retrieve Salesforce metadata and commit it to an Azure DevOps branch."
    )
    parser.add_argument("--ado-url", help="Repository URL (fills org, project and repo)")
    parser.add_argument("--target-branch", help="Branch receiving the commit")
    parser.add_argument("--source-branch", help="Branch to create the target branch from")
    parser.add_argument("--cookies-file", help="Netscape cookies.txt holding the Salesforce sid cookie")
    parser.add_argument("--domain", help="Salesforce org hostname used to pick the session cookie")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--package-xml-file", help="package.xml describing what to retrieve")
    source.add_argument("--template", choices=sorted(PACKAGE_TEMPLATES), help="Built-in package.xml template")
    parser.add_argument("--backup-dir", help="Directory receiving a copy of the retrieved archive")
    parser.add_argument("--message", help="Commit message")
    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.ado_url:
        info = parse_ado_url(args.ado_url)
        overrides.update(org=info.org, project=info.project, repo=info.repo)
    if args.template:
        overrides["package_descriptor"] = get_template(args.template)
    elif args.package_xml_file:
        with open(args.package_xml_file, encoding="utf-8") as handle:
            overrides["package_descriptor"] = handle.read()

    optional = {
        "target_branch": args.target_branch,
        "source_branch": args.source_branch,
        "salesforce_domain": args.domain,
        "backup_dir": args.backup_dir,
        "commit_message": args.message,
    }
    overrides.update({key: value for key, value in optional.items() if value})
    return overrides


def stored_session_from_env() -> Optional[SalesforceSession]:
    server_url = os.getenv("SF_SERVER_URL")
    session_id = os.getenv("SF_SESSION_ID")
    if server_url and session_id:
        return SalesforceSession(server_url=server_url.rstrip("/"), session_id=session_id)
    return None


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = SyncConfig.from_env(**config_overrides(args))

    cookies: List[SessionCookie] = []
    if args.cookies_file:
        cookies = load_cookies_from_file(args.cookies_file)
        logger.info(f"Loaded {len(cookies)} cookies from {args.cookies_file}")

    orchestrator = SyncOrchestrator(SalesforceService(cookie_source=lambda: cookies))
    result = await orchestrator.run(config, stored_session=stored_session_from_env())

    print(result.job.model_dump_json(by_alias=True, indent=2))
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main()))
