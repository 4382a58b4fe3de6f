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

"""Entry point of the code scanning migration step."""

from shared.common import ConsoleLogger
from shared.github_code_scanning import CodeScanningApi

from .alert_reconciler import AlertReconciler
from .analysis_replicator import AnalysisReplicator
from .models import DEFAULT_MAX_CONCURRENCY, MigrationSummary


class CodeScanningService:
    """Migrates code scanning analyses and alert states between two repositories.

    The source and target clients are injected so each side can point at a
    different host or use different credentials.
    """

    def __init__(
        self,
        source_api: CodeScanningApi,
        target_api: CodeScanningApi,
        logger: ConsoleLogger,
        *,
        dry_run: bool = False,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        self._analyses = AnalysisReplicator(
            source_api, target_api, logger, dry_run=dry_run, max_concurrency=max_concurrency
        )
        self._alerts = AlertReconciler(
            source_api, target_api, logger, dry_run=dry_run, max_concurrency=max_concurrency
        )

    async def migrate_analyses(
        self,
        source_org: str,
        source_repo: str,
        target_org: str,
        target_repo: str,
    ) -> MigrationSummary:
        return await self._analyses.migrate_analyses(source_org, source_repo, target_org, target_repo)

    async def migrate_alerts(
        self,
        source_org: str,
        source_repo: str,
        target_org: str,
        target_repo: str,
        branch: str,
    ) -> MigrationSummary:
        return await self._alerts.migrate_alerts(source_org, source_repo, target_org, target_repo, branch)
