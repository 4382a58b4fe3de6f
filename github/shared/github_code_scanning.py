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

"""GitHub code scanning REST operations – default branch lookup, analyses
listing, SARIF report download / upload, alert listing and alert state
updates.

Blocking HTTP calls run in a worker thread so the migration services can
await them and fan out per-item work.
"""

from __future__ import annotations

import asyncio
import base64
import gzip
import sys
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import requests
from github import Auth, Github

from .common import vprint
from .models import Alert, Analysis, SarifContainer

DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
SARIF_MEDIA_TYPE = "application/sarif+json"

T = TypeVar("T")


class CodeScanningApi(Protocol):
    """Operations the migration services need from one repository host."""

    async def get_default_branch(self, org: str, repo: str) -> str: ...

    async def get_code_scanning_analyses(self, org: str, repo: str, ref: str) -> list[Analysis]: ...

    async def get_sarif_report(self, org: str, repo: str, analysis_id: int) -> str: ...

    async def upload_sarif_report(self, org: str, repo: str, container: SarifContainer) -> None: ...

    async def get_code_scanning_alerts(self, org: str, repo: str, branch: str) -> list[Alert]: ...

    async def update_code_scanning_alert(
        self,
        org: str,
        repo: str,
        alert_number: int,
        state: str,
        dismissed_reason: str | None = None,
        dismissed_comment: str | None = None,
    ) -> None: ...


def encode_sarif(sarif: str) -> str:
    """Gzip and base64-encode a SARIF document for the ``sarifs`` endpoint."""
    return base64.b64encode(gzip.compress(sarif.encode("utf-8"))).decode("ascii")


def parse_items(items: list[dict[str, Any]], parse: Callable[[dict[str, Any]], T], what: str) -> list[T]:
    """Map API payloads to records, skipping entries that cannot be parsed."""
    parsed: list[T] = []
    for obj in items:
        try:
            parsed.append(parse(obj))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            print(f"WARN: Skipping unparseable {what}: {exc}", file=sys.stderr)
            continue
    return parsed


def build_alert_update(state: str, dismissed_reason: str | None, dismissed_comment: str | None) -> dict[str, Any]:
    """Build the PATCH body for an alert state change.

    GitHub rejects dismissal fields on reopen and clears them itself, so they
    are only sent together with ``dismissed``.
    """
    body: dict[str, Any] = {"state": state}
    if state == "dismissed":
        body["dismissed_reason"] = dismissed_reason
        body["dismissed_comment"] = dismissed_comment or ""
    return body


class GithubCodeScanningApi:
    """Code scanning client bound to one GitHub host and token."""

    TIMEOUT = 30
    PAGE_SIZE = 100

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL):
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self._github = Github(auth=Auth.Token(token), base_url=self.api_url, timeout=self.TIMEOUT)
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
        )

    def _repo_url(self, org: str, repo: str) -> str:
        return f"{self.api_url}/repos/{org}/{repo}"

    def _get_paginated(self, url: str, params: dict[str, Any] | None) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        next_url: str | None = url
        while next_url:
            response = self._session.get(next_url, params=params, timeout=self.TIMEOUT)
            response.raise_for_status()
            items.extend(response.json() or [])
            next_link = response.links.get("next")
            next_url = next_link["url"] if next_link else None
            # The next link already carries the query string.
            params = None
        return items

    # ------------------------------------------------------------------
    # Synchronous implementations
    # ------------------------------------------------------------------

    def _get_default_branch_sync(self, org: str, repo: str) -> str:
        return self._github.get_repo(f"{org}/{repo}").default_branch

    def _get_code_scanning_analyses_sync(self, org: str, repo: str, ref: str) -> list[Analysis]:
        url = f"{self._repo_url(org, repo)}/code-scanning/analyses"
        try:
            items = self._get_paginated(url, {"ref": ref, "per_page": self.PAGE_SIZE})
        except requests.HTTPError as exc:
            # GitHub answers 404 "no analysis found" for repositories without analyses.
            if exc.response is not None and exc.response.status_code == 404:
                vprint(f"No code scanning analyses found for {org}/{repo} ref={ref}")
                return []
            raise
        return parse_items(items, Analysis.from_api, f"analysis of {org}/{repo}")

    def _get_sarif_report_sync(self, org: str, repo: str, analysis_id: int) -> str:
        url = f"{self._repo_url(org, repo)}/code-scanning/analyses/{int(analysis_id)}"
        response = self._session.get(url, headers={"Accept": SARIF_MEDIA_TYPE}, timeout=self.TIMEOUT)
        response.raise_for_status()
        return response.text

    def _upload_sarif_report_sync(self, org: str, repo: str, container: SarifContainer) -> None:
        url = f"{self._repo_url(org, repo)}/code-scanning/sarifs"
        payload = {
            "commit_sha": container.commit_sha,
            "ref": container.ref,
            "sarif": encode_sarif(container.sarif),
        }
        response = self._session.post(url, json=payload, timeout=self.TIMEOUT)
        response.raise_for_status()
        vprint(f"Uploaded SARIF to {org}/{repo} (ref={container.ref} commit={container.commit_sha})")

    def _get_code_scanning_alerts_sync(self, org: str, repo: str, branch: str) -> list[Alert]:
        url = f"{self._repo_url(org, repo)}/code-scanning/alerts"
        items = self._get_paginated(url, {"ref": branch, "per_page": self.PAGE_SIZE})
        return parse_items(items, Alert.from_api, f"alert of {org}/{repo}")

    def _update_code_scanning_alert_sync(
        self,
        org: str,
        repo: str,
        alert_number: int,
        state: str,
        dismissed_reason: str | None,
        dismissed_comment: str | None,
    ) -> None:
        url = f"{self._repo_url(org, repo)}/code-scanning/alerts/{int(alert_number)}"
        body = build_alert_update(state, dismissed_reason, dismissed_comment)
        response = self._session.patch(url, json=body, timeout=self.TIMEOUT)
        response.raise_for_status()

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def get_default_branch(self, org: str, repo: str) -> str:
        return await asyncio.to_thread(self._get_default_branch_sync, org, repo)

    async def get_code_scanning_analyses(self, org: str, repo: str, ref: str) -> list[Analysis]:
        return await asyncio.to_thread(self._get_code_scanning_analyses_sync, org, repo, ref)

    async def get_sarif_report(self, org: str, repo: str, analysis_id: int) -> str:
        return await asyncio.to_thread(self._get_sarif_report_sync, org, repo, analysis_id)

    async def upload_sarif_report(self, org: str, repo: str, container: SarifContainer) -> None:
        await asyncio.to_thread(self._upload_sarif_report_sync, org, repo, container)

    async def get_code_scanning_alerts(self, org: str, repo: str, branch: str) -> list[Alert]:
        return await asyncio.to_thread(self._get_code_scanning_alerts_sync, org, repo, branch)

    async def update_code_scanning_alert(
        self,
        org: str,
        repo: str,
        alert_number: int,
        state: str,
        dismissed_reason: str | None = None,
        dismissed_comment: str | None = None,
    ) -> None:
        await asyncio.to_thread(
            self._update_code_scanning_alert_sync,
            org,
            repo,
            alert_number,
            state,
            dismissed_reason,
            dismissed_comment,
        )
