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

"""Shared fakes and builders for the code scanning migration tests."""

import pytest

from shared.models import Alert, AlertInstance, Analysis, Location, SarifContainer

SOURCE_ORG = "SOURCE-ORG"
SOURCE_REPO = "SOURCE-REPO"
TARGET_ORG = "TARGET-ORG"
TARGET_REPO = "TARGET-REPO"


class FakeCodeScanningApi:
    """In-memory stand-in for one repository host; records every call."""

    def __init__(
        self,
        *,
        default_branch: str = "refs/heads/main",
        analyses: list[Analysis] | None = None,
        sarif_reports: dict[int, str] | None = None,
        alerts: list[Alert] | None = None,
        failing_reports: set[int] | None = None,
        failing_uploads: set[str] | None = None,
        failing_updates: set[int] | None = None,
    ):
        self.default_branch = default_branch
        self.analyses = list(analyses or [])
        self.sarif_reports = dict(sarif_reports or {})
        self.alerts = list(alerts or [])
        self.failing_reports = failing_reports or set()
        self.failing_uploads = failing_uploads or set()
        self.failing_updates = failing_updates or set()
        self.calls: list[tuple] = []
        self.uploads: list[tuple[str, str, SarifContainer]] = []
        self.updates: list[tuple[str, str, int, str, str | None, str | None]] = []

    async def get_default_branch(self, org, repo):
        self.calls.append(("get_default_branch", org, repo))
        return self.default_branch

    async def get_code_scanning_analyses(self, org, repo, ref):
        self.calls.append(("get_code_scanning_analyses", org, repo, ref))
        return list(self.analyses)

    async def get_sarif_report(self, org, repo, analysis_id):
        self.calls.append(("get_sarif_report", org, repo, analysis_id))
        if analysis_id in self.failing_reports:
            raise RuntimeError(f"report {analysis_id} unavailable")
        return self.sarif_reports[analysis_id]

    async def upload_sarif_report(self, org, repo, container):
        self.calls.append(("upload_sarif_report", org, repo, container))
        if container.commit_sha in self.failing_uploads:
            raise RuntimeError(f"upload rejected for {container.commit_sha}")
        self.uploads.append((org, repo, container))

    async def get_code_scanning_alerts(self, org, repo, branch):
        self.calls.append(("get_code_scanning_alerts", org, repo, branch))
        return list(self.alerts)

    async def update_code_scanning_alert(
        self, org, repo, alert_number, state, dismissed_reason=None, dismissed_comment=None
    ):
        self.calls.append(("update_code_scanning_alert", org, repo, alert_number))
        if alert_number in self.failing_updates:
            raise RuntimeError(f"alert {alert_number} update rejected")
        self.updates.append((org, repo, alert_number, state, dismissed_reason, dismissed_comment))


class RecordingLogger:
    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.verbose_lines: list[str] = []

    def info(self, msg):
        self.infos.append(msg)

    def warn(self, msg):
        self.warnings.append(msg)

    def error(self, msg):
        self.errors.append(msg)

    def verbose(self, msg):
        self.verbose_lines.append(msg)


def make_location(path="path/to/file.cs", start_line=3, start_column=4, end_line=6, end_column=25):
    return Location(
        path=path,
        start_line=start_line,
        start_column=start_column,
        end_line=end_line,
        end_column=end_column,
    )


def make_instance(
    ref="refs/heads/main",
    commit_sha="SHA_1",
    analysis_key="123456",
    location=None,
    state="open",
):
    return AlertInstance(
        ref=ref,
        state=state,
        analysis_key=analysis_key,
        commit_sha=commit_sha,
        location=location if location is not None else make_location(),
    )


def make_alert(
    number,
    instance,
    *,
    rule_id="java/rule",
    state="open",
    dismissed_reason=None,
    dismissed_comment=None,
    dismissed_at=None,
):
    return Alert(
        number=number,
        rule_id=rule_id,
        state=state,
        dismissed_at=dismissed_at,
        dismissed_reason=dismissed_reason,
        dismissed_comment=dismissed_comment,
        instance=instance,
    )


@pytest.fixture
def logger():
    return RecordingLogger()
