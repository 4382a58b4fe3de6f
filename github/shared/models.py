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

"""Code scanning records as returned by the GitHub REST API.

All records are frozen: they are snapshots of remote state and are never
mutated locally. ``from_api`` constructors map the REST payload keys
(``snake_case`` JSON) onto the record fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Analysis:
    id: int
    category: str
    created_at: str
    commit_sha: str
    ref: str

    @classmethod
    def from_api(cls, obj: dict[str, Any]) -> Analysis:
        if obj.get("id") is None:
            raise ValueError("analysis payload has no id")
        return cls(
            id=int(obj["id"]),
            category=str(obj.get("category") or ""),
            created_at=str(obj.get("created_at") or ""),
            commit_sha=str(obj.get("commit_sha") or ""),
            ref=str(obj.get("ref") or ""),
        )


@dataclass(frozen=True)
class SarifContainer:
    """SARIF upload payload; ``sarif`` is the raw report text."""
    sarif: str
    ref: str
    commit_sha: str

    @classmethod
    def from_analysis(cls, analysis: Analysis, sarif: str) -> SarifContainer:
        return cls(sarif=sarif, ref=analysis.ref, commit_sha=analysis.commit_sha)


@dataclass(frozen=True)
class Location:
    path: str
    start_line: int | None
    start_column: int | None
    end_line: int | None
    end_column: int | None

    @classmethod
    def from_api(cls, obj: dict[str, Any] | None) -> Location | None:
        if not obj or not obj.get("path"):
            return None
        return cls(
            path=str(obj["path"]),
            start_line=obj.get("start_line"),
            start_column=obj.get("start_column"),
            end_line=obj.get("end_line"),
            end_column=obj.get("end_column"),
        )

    def describe(self) -> str:
        return f"{self.path}:{self.start_line}:{self.start_column}-{self.end_line}:{self.end_column}"


@dataclass(frozen=True)
class AlertInstance:
    """Most recent occurrence of an alert (``most_recent_instance``)."""
    ref: str
    state: str
    analysis_key: str
    commit_sha: str
    location: Location | None

    @classmethod
    def from_api(cls, obj: dict[str, Any] | None) -> AlertInstance | None:
        if not obj:
            return None
        return cls(
            ref=str(obj.get("ref") or ""),
            state=str(obj.get("state") or ""),
            analysis_key=str(obj.get("analysis_key") or ""),
            commit_sha=str(obj.get("commit_sha") or ""),
            location=Location.from_api(obj.get("location")),
        )


@dataclass(frozen=True)
class Alert:
    number: int
    rule_id: str
    state: str
    dismissed_at: str | None = None
    dismissed_reason: str | None = None
    dismissed_comment: str | None = None
    instance: AlertInstance | None = None

    @classmethod
    def from_api(cls, obj: dict[str, Any]) -> Alert:
        if obj.get("number") is None:
            raise ValueError("alert payload has no number")
        rule = obj.get("rule") or {}
        return cls(
            number=int(obj["number"]),
            rule_id=str(rule.get("id") or ""),
            state=str(obj.get("state") or "").lower(),
            dismissed_at=obj.get("dismissed_at"),
            dismissed_reason=obj.get("dismissed_reason"),
            dismissed_comment=obj.get("dismissed_comment"),
            instance=AlertInstance.from_api(obj.get("most_recent_instance")),
        )
