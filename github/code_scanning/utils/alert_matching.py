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

"""Cross-repository alert matching.

Alert numbers are assigned independently per repository, so a source alert
is paired with a target alert through its most recent instance. Candidates
share the source alert's ``rule_id`` and are resolved most specific first:

1. ``instance``   – same ref, analysis key, commit SHA and location
2. ``commit_sha`` – same commit SHA, among candidates at the same location
3. ``ref``        – same ref, among candidates still tied
4. ``location``   – same path / line / column range

Commit SHA and ref are shared by many unrelated findings, so they only break
ties between candidates at the source location and never select a target on
their own. A tie-breaker that matches none of the tied candidates is skipped.
When no candidate shares the location the alert is unmatched; when several
remain tied after every step it is ambiguous.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from shared.models import Alert, AlertInstance

from .models import MalformedAlertError

MatchCriterion = Callable[[AlertInstance, AlertInstance], bool]


def same_instance(source: AlertInstance, target: AlertInstance) -> bool:
    return (
        source.ref == target.ref
        and source.analysis_key == target.analysis_key
        and source.commit_sha == target.commit_sha
        and source.location == target.location
    )


def same_commit_sha(source: AlertInstance, target: AlertInstance) -> bool:
    return source.commit_sha == target.commit_sha


def same_ref(source: AlertInstance, target: AlertInstance) -> bool:
    return source.ref == target.ref


def same_location(source: AlertInstance, target: AlertInstance) -> bool:
    return source.location == target.location


# Applied in order to candidates that share the source location.
TIE_BREAKERS: list[tuple[str, MatchCriterion]] = [
    ("commit_sha", same_commit_sha),
    ("ref", same_ref),
]


@dataclass(frozen=True)
class MatchOutcome:
    """Result of matching one source alert.

    ``target`` is set on a unique match. Otherwise ``candidates`` holds the
    alerts still tied at the end (empty when nothing shares the location).
    """
    target: Alert | None
    criterion: str | None
    candidates: tuple[Alert, ...]

    @property
    def is_ambiguous(self) -> bool:
        return self.target is None and len(self.candidates) > 1


def is_matchable(alert: Alert) -> bool:
    return bool(alert.rule_id) and alert.instance is not None and alert.instance.location is not None


def require_instance(alert: Alert) -> AlertInstance:
    if not alert.rule_id:
        raise MalformedAlertError(f"alert #{alert.number} has no rule id")
    if alert.instance is None:
        raise MalformedAlertError(f"alert #{alert.number} ({alert.rule_id}) has no most recent instance")
    if alert.instance.location is None:
        raise MalformedAlertError(f"alert #{alert.number} ({alert.rule_id}) has no instance location")
    return alert.instance


def group_candidates_by_rule(alerts: Iterable[Alert]) -> dict[str, list[Alert]]:
    """Index target alerts by ``rule_id``, sorted by number within a rule.

    Alerts without a rule id or a usable instance can never be matched and
    are left out.
    """
    by_rule: dict[str, list[Alert]] = {}
    for alert in alerts:
        if not is_matchable(alert):
            continue
        by_rule.setdefault(alert.rule_id, []).append(alert)
    for candidates in by_rule.values():
        candidates.sort(key=lambda a: a.number)
    return by_rule


def _match(target: Alert, criterion: str) -> MatchOutcome:
    return MatchOutcome(target=target, criterion=criterion, candidates=(target,))


def find_matching_alert(source: Alert, candidates: Iterable[Alert]) -> MatchOutcome:
    """Match *source* against same-rule *candidates*.

    Raises ``MalformedAlertError`` when the source alert has no rule id,
    instance or location to compare.
    """
    instance = require_instance(source)
    remaining = sorted(
        (c for c in candidates if c.rule_id == source.rule_id and is_matchable(c)),
        key=lambda a: a.number,
    )

    exact = [c for c in remaining if same_instance(instance, c.instance)]
    if len(exact) == 1:
        return _match(exact[0], "instance")
    if exact:
        # Identical instances cannot be told apart by any weaker criterion.
        return MatchOutcome(target=None, criterion=None, candidates=tuple(exact))

    tied = [c for c in remaining if same_location(instance, c.instance)]
    if not tied:
        return MatchOutcome(target=None, criterion=None, candidates=())

    for name, criterion in TIE_BREAKERS:
        if len(tied) == 1:
            break
        narrowed = [c for c in tied if criterion(instance, c.instance)]
        if len(narrowed) == 1:
            return _match(narrowed[0], name)
        if narrowed:
            tied = narrowed

    if len(tied) == 1:
        return _match(tied[0], "location")
    return MatchOutcome(target=None, criterion=None, candidates=tuple(tied))
