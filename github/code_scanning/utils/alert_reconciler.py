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

"""Mirrors the open / dismissed state of source alerts onto the matching
target alerts.
"""

import asyncio

from shared.common import ConsoleLogger
from shared.github_code_scanning import CodeScanningApi
from shared.models import Alert

from .alert_matching import find_matching_alert, group_candidates_by_rule
from .models import (
    DEFAULT_MAX_CONCURRENCY,
    MIGRATABLE_ALERT_STATES,
    AlertMatch,
    CodeScanningMigrationError,
    MalformedAlertError,
    MigrationSummary,
)


def _describe(alert: Alert) -> str:
    return f"alert #{alert.number} ({alert.rule_id})"


class AlertReconciler:
    """Match source alerts to target alerts and push the source state."""

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

    async def migrate_alerts(
        self,
        source_org: str,
        source_repo: str,
        target_org: str,
        target_repo: str,
        branch: str,
    ) -> MigrationSummary:
        summary = MigrationSummary(step="Code scanning alerts")

        source_alerts, target_alerts = await asyncio.gather(
            self.source_api.get_code_scanning_alerts(source_org, source_repo, branch),
            self.target_api.get_code_scanning_alerts(target_org, target_repo, branch),
        )
        self.logger.info(
            f"Loaded {len(source_alerts)} source alerts from {source_org}/{source_repo} and "
            f"{len(target_alerts)} target alerts from {target_org}/{target_repo} (branch={branch})"
        )

        matches = self.match_alerts(source_alerts, target_alerts, summary)

        semaphore = asyncio.Semaphore(self.max_concurrency)
        await asyncio.gather(
            *[
                self._apply_match(semaphore, match, summary, target_org=target_org, target_repo=target_repo)
                for match in matches
            ]
        )

        self.logger.info(summary.render())
        if summary.has_failures:
            raise CodeScanningMigrationError(summary)
        return summary

    def match_alerts(
        self,
        source_alerts: list[Alert],
        target_alerts: list[Alert],
        summary: MigrationSummary,
    ) -> list[AlertMatch]:
        """Pair migratable source alerts with target alerts.

        Unmatched, ambiguous and malformed source alerts are recorded on
        *summary*. A target alert claimed by more than one source alert is
        left untouched, so each target receives at most one update.
        """
        candidates_by_rule = group_candidates_by_rule(target_alerts)
        claims: dict[int, list[AlertMatch]] = {}

        for source in source_alerts:
            item = _describe(source)
            if source.state not in MIGRATABLE_ALERT_STATES:
                self.logger.verbose(f"Skipping source {item}: state {source.state!r} is not migrated")
                summary.add_skip(item)
                continue

            try:
                outcome = find_matching_alert(source, candidates_by_rule.get(source.rule_id, []))
            except MalformedAlertError as exc:
                self.logger.warn(f"Cannot match source {item}: {exc}")
                summary.add_failure(item, exc)
                continue

            if outcome.target is None:
                if outcome.is_ambiguous:
                    numbers = ", ".join(f"#{c.number}" for c in outcome.candidates)
                    self.logger.warn(
                        f"Ambiguous match for source {item}: target candidates {numbers} "
                        f"for rule_id={source.rule_id}; skipping"
                    )
                else:
                    self.logger.warn(f"No matching target alert for source {item}; skipping")
                summary.add_skip(item)
                continue

            claims.setdefault(outcome.target.number, []).append(
                AlertMatch(source=source, target=outcome.target, criterion=outcome.criterion or "")
            )

        matches: list[AlertMatch] = []
        for target_number in sorted(claims):
            claimed = sorted(claims[target_number], key=lambda m: m.source.number)
            if len(claimed) > 1:
                sources = ", ".join(f"#{m.source.number}" for m in claimed)
                self.logger.warn(
                    f"Target alert #{target_number} matched by several source alerts ({sources}) "
                    f"for rule_id={claimed[0].source.rule_id}; skipping"
                )
                for m in claimed:
                    summary.add_skip(_describe(m.source))
                continue
            matches.append(claimed[0])

        return matches

    async def _apply_match(
        self,
        semaphore: asyncio.Semaphore,
        match: AlertMatch,
        summary: MigrationSummary,
        *,
        target_org: str,
        target_repo: str,
    ) -> None:
        source = match.source
        item = _describe(source)
        target_number = match.target.number
        async with semaphore:
            try:
                if self.dry_run:
                    self.logger.info(
                        f"DRY-RUN: would set target alert #{target_number} in {target_org}/{target_repo} "
                        f"to state={source.state} reason={source.dismissed_reason or ''} (source {item})"
                    )
                else:
                    await self.target_api.update_code_scanning_alert(
                        target_org,
                        target_repo,
                        target_number,
                        source.state,
                        source.dismissed_reason,
                        source.dismissed_comment,
                    )
            except Exception as exc:
                self.logger.warn(f"Failed to update target alert #{target_number} from source {item}: {exc}")
                summary.add_failure(item, exc)
                return

        self.logger.verbose(
            f"Target alert #{target_number} set to {source.state} from source {item} (matched by {match.criterion})"
        )
        summary.add_success(item)
