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

"""Migration-specific data models and errors."""

from dataclasses import dataclass, field

from shared.models import Alert

ALERT_STATE_OPEN = "open"
ALERT_STATE_DISMISSED = "dismissed"

# Source alert states whose lifecycle is mirrored onto the target.
MIGRATABLE_ALERT_STATES = frozenset({ALERT_STATE_OPEN, ALERT_STATE_DISMISSED})

DEFAULT_MAX_CONCURRENCY = 4


@dataclass
class MigrationSummary:
    """Aggregated outcome of one migration step."""
    step: str
    succeeded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)

    def add_success(self, item: str) -> None:
        self.succeeded.append(item)

    def add_skip(self, item: str) -> None:
        self.skipped.append(item)

    def add_failure(self, item: str, error: BaseException | str) -> None:
        self.failed.append(item)
        self.errors.append((item, str(error)))

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def render(self) -> str:
        return (
            f"{self.step}: {len(self.succeeded)} succeeded, "
            f"{len(self.skipped)} skipped, {len(self.failed)} failed"
        )


@dataclass(frozen=True)
class AlertMatch:
    """A source alert paired with the target alert that mirrors it."""
    source: Alert
    target: Alert
    criterion: str


class CodeScanningMigrationError(RuntimeError):
    """Raised after a migration step finished with per-item failures."""

    def __init__(self, summary: MigrationSummary):
        self.summary = summary
        details = "; ".join(f"{item}: {msg}" for item, msg in summary.errors)
        super().__init__(f"{summary.render()} ({details})")


class MalformedAlertError(ValueError):
    """Raised when an alert lacks the instance data needed for matching."""
