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

"""Replays completed code scanning analyses of the source repository's
default branch onto the target repository as SARIF uploads.
"""

import asyncio

from shared.common import ConsoleLogger
from shared.github_code_scanning import CodeScanningApi
from shared.models import Analysis, SarifContainer

from .models import DEFAULT_MAX_CONCURRENCY, CodeScanningMigrationError, MigrationSummary


class AnalysisReplicator:
    """Upload one SARIF report to the target per source analysis."""

    def __init__(
        self,
        source_api: CodeScanningApi,
        target_api: CodeScanningApi,
        logger: ConsoleLogger,
        *,
        dry_run: bool = False,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        self.source_api = source_api
        self.target_api = target_api
        self.logger = logger
        self.dry_run = dry_run
        self.max_concurrency = max(1, int(max_concurrency))

    async def migrate_analyses(
        self,
        source_org: str,
        source_repo: str,
        target_org: str,
        target_repo: str,
    ) -> MigrationSummary:
        """Replicate every analysis of the source default branch.

        A failure for one analysis does not stop the others; failures are
        collected and raised together as ``CodeScanningMigrationError``.
        """
        summary = MigrationSummary(step="Code scanning analyses")

        default_branch = await self.source_api.get_default_branch(source_org, source_repo)
        analyses = await self.source_api.get_code_scanning_analyses(source_org, source_repo, default_branch)
        self.logger.info(
            f"Found {len(analyses)} code scanning analyses in {source_org}/{source_repo} (ref={default_branch})"
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        await asyncio.gather(
            *[
                self._migrate_analysis(
                    semaphore,
                    analysis,
                    summary,
                    source_org=source_org,
                    source_repo=source_repo,
                    target_org=target_org,
                    target_repo=target_repo,
                )
                for analysis in analyses
            ]
        )

        self.logger.info(summary.render())
        if summary.has_failures:
            raise CodeScanningMigrationError(summary)
        return summary

    async def _migrate_analysis(
        self,
        semaphore: asyncio.Semaphore,
        analysis: Analysis,
        summary: MigrationSummary,
        *,
        source_org: str,
        source_repo: str,
        target_org: str,
        target_repo: str,
    ) -> None:
        item = f"analysis {analysis.id}"
        async with semaphore:
            try:
                sarif = await self.source_api.get_sarif_report(source_org, source_repo, analysis.id)
                container = SarifContainer.from_analysis(analysis, sarif)
                if self.dry_run:
                    self.logger.info(
                        f"DRY-RUN: would upload SARIF of {item} to {target_org}/{target_repo} "
                        f"(ref={container.ref} commit={container.commit_sha})"
                    )
                else:
                    await self.target_api.upload_sarif_report(target_org, target_repo, container)
            except Exception as exc:
                self.logger.warn(f"Failed to migrate {item} (commit={analysis.commit_sha}): {exc}")
                summary.add_failure(item, exc)
                return

        self.logger.verbose(f"Migrated {item} (ref={analysis.ref} commit={analysis.commit_sha})")
        summary.add_success(item)
