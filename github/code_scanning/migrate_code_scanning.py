#!/usr/bin/env python3
#
# Copyright 2026 ABSA Group Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Migrate code scanning results from one GitHub repository to another.

Steps:
- Analyses: every completed analysis of the source default branch is
  re-uploaded to the target repository as SARIF.
- Alerts: the open / dismissed state (with dismissal reason and comment) of
  each source alert is applied to the matching target alert.

Target alerts are produced by the uploaded analyses, so run the analyses
step first and let GitHub finish processing before migrating alert states.

Environment variables:
- GH_PAT          token for the target repository (and source, unless overridden)
- GH_SOURCE_PAT   optional token for the source repository
- RUNNER_DEBUG    '1' enables verbose logs

Draft / debug (no writes):
    `migrate-code-scanning --source-org a --source-repo r --target-org b --target-repo r --dry-run`
"""

from __future__ import annotations

import argparse
import asyncio
import os

import requests
from github import GithubException

from shared.common import ConsoleLogger, parse_runner_debug, require_env, set_verbose_enabled
from shared.github_code_scanning import DEFAULT_API_URL, CodeScanningApi, GithubCodeScanningApi

from code_scanning.utils.code_scanning_service import CodeScanningService
from code_scanning.utils.models import DEFAULT_MAX_CONCURRENCY, CodeScanningMigrationError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Migrate code scanning analyses and alert states between repositories")
    p.add_argument("--source-org", required=True, help="Organisation owning the source repository")
    p.add_argument("--source-repo", required=True, help="Source repository name")
    p.add_argument("--target-org", required=True, help="Organisation owning the target repository")
    p.add_argument("--target-repo", required=True, help="Target repository name")
    p.add_argument(
        "--branch",
        default=None,
        help="Branch whose alerts are migrated (default: source default branch)",
    )
    p.add_argument(
        "--source-api-url",
        default=DEFAULT_API_URL,
        help=f"API URL of the source host (default: {DEFAULT_API_URL})",
    )
    p.add_argument(
        "--target-api-url",
        default=DEFAULT_API_URL,
        help=f"API URL of the target host (default: {DEFAULT_API_URL})",
    )
    p.add_argument("--skip-analyses", action="store_true", help="Do not replay SARIF analyses")
    p.add_argument("--skip-alerts", action="store_true", help="Do not migrate alert states")
    p.add_argument(
        "--max-concurrency",
        type=int,
        default=DEFAULT_MAX_CONCURRENCY,
        help=f"Maximum concurrent per-item API calls (default: {DEFAULT_MAX_CONCURRENCY})",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Read both repositories but do not upload analyses or update alerts",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logs (also enabled when RUNNER_DEBUG=1)",
    )
    args = p.parse_args(argv)
    if args.skip_analyses and args.skip_alerts:
        p.error("--skip-analyses and --skip-alerts together leave nothing to migrate")
    if args.max_concurrency < 1:
        p.error("--max-concurrency must be at least 1")
    return args


def resolve_tokens() -> tuple[str, str]:
    """Return ``(source_token, target_token)`` from the environment."""
    target_token = require_env("GH_PAT")
    source_token = os.getenv("GH_SOURCE_PAT") or target_token
    return source_token, target_token


async def run_migration(
    args: argparse.Namespace,
    source_api: CodeScanningApi,
    target_api: CodeScanningApi,
    logger: ConsoleLogger,
) -> bool:
    """Run the selected steps and return True when every step succeeded."""
    service = CodeScanningService(
        source_api,
        target_api,
        logger,
        dry_run=bool(args.dry_run),
        max_concurrency=args.max_concurrency,
    )
    ok = True

    if not args.skip_analyses:
        try:
            await service.migrate_analyses(args.source_org, args.source_repo, args.target_org, args.target_repo)
        except CodeScanningMigrationError as exc:
            logger.error(f"Analyses migration finished with failures: {exc}")
            ok = False
        except (requests.RequestException, GithubException) as exc:
            logger.error(f"Analyses migration aborted: {exc}")
            ok = False

    if not args.skip_alerts:
        try:
            branch = args.branch or await source_api.get_default_branch(args.source_org, args.source_repo)
            await service.migrate_alerts(
                args.source_org, args.source_repo, args.target_org, args.target_repo, branch
            )
        except CodeScanningMigrationError as exc:
            logger.error(f"Alerts migration finished with failures: {exc}")
            ok = False
        except (requests.RequestException, GithubException) as exc:
            logger.error(f"Alerts migration aborted: {exc}")
            ok = False

    return ok


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    set_verbose_enabled(bool(args.verbose) or parse_runner_debug())

    source_token, target_token = resolve_tokens()
    source_api = GithubCodeScanningApi(source_token, args.source_api_url)
    target_api = GithubCodeScanningApi(target_token, args.target_api_url)

    if not asyncio.run(run_migration(args, source_api, target_api, ConsoleLogger())):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
