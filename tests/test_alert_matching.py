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

"""Unit tests for the ordered alert equivalence criteria."""

import pytest

from code_scanning.utils.alert_matching import (
    TIE_BREAKERS,
    find_matching_alert,
    group_candidates_by_rule,
    same_instance,
)
from code_scanning.utils.models import MalformedAlertError
from conftest import make_alert, make_instance, make_location
from shared.models import AlertInstance


def test_tie_breakers_are_ordered_from_most_to_least_specific():
    assert [name for name, _ in TIE_BREAKERS] == ["commit_sha", "ref"]


def test_same_instance_ignores_instance_state():
    assert same_instance(make_instance(state="open"), make_instance(state="dismissed"))


def test_same_instance_compares_every_location_field():
    base = make_instance()
    for changed in (
        make_location(path="other/file.cs"),
        make_location(start_line=4),
        make_location(start_column=5),
        make_location(end_line=7),
        make_location(end_column=26),
    ):
        assert not same_instance(base, make_instance(location=changed))


def test_full_instance_match_wins_first():
    source = make_alert(1, make_instance())
    candidates = [make_alert(2, make_instance()), make_alert(3, make_instance(analysis_key="other"))]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target.number == 2
    assert outcome.criterion == "instance"


def test_commit_sha_disambiguates_when_instance_does_not_match():
    source = make_alert(1, make_instance(commit_sha="SHA_1", analysis_key="src"))
    candidates = [
        make_alert(2, make_instance(commit_sha="SHA_2", analysis_key="dst")),
        make_alert(3, make_instance(commit_sha="SHA_1", analysis_key="dst")),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target.number == 3
    assert outcome.criterion == "commit_sha"


def test_ref_narrows_after_commit_sha_ties():
    source = make_alert(1, make_instance(ref="refs/heads/dev", analysis_key="src"))
    candidates = [
        make_alert(2, make_instance(ref="refs/heads/main", analysis_key="dst")),
        make_alert(3, make_instance(ref="refs/heads/dev", analysis_key="dst")),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target.number == 3
    assert outcome.criterion == "ref"


def test_location_is_the_last_resort():
    source = make_alert(1, make_instance(analysis_key="src", location=make_location(start_line=9)))
    candidates = [
        make_alert(2, make_instance(analysis_key="dst", location=make_location(start_line=3))),
        make_alert(3, make_instance(analysis_key="dst", location=make_location(start_line=9))),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target.number == 3
    assert outcome.criterion == "location"


def test_criterion_without_any_match_does_not_empty_the_candidates():
    # Commit SHA matches nobody; ref then picks the single candidate on the same branch.
    source = make_alert(1, make_instance(ref="refs/heads/dev", commit_sha="SHA_X", analysis_key="src"))
    candidates = [
        make_alert(2, make_instance(ref="refs/heads/main", commit_sha="SHA_1", analysis_key="dst")),
        make_alert(3, make_instance(ref="refs/heads/dev", commit_sha="SHA_2", analysis_key="dst")),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target.number == 3
    assert outcome.criterion == "ref"


def test_no_shared_signal_is_unmatched_not_ambiguous():
    source = make_alert(1, make_instance(ref="refs/heads/a", commit_sha="SHA_A", location=make_location(start_line=1)))
    candidates = [
        make_alert(2, make_instance(ref="refs/heads/b", commit_sha="SHA_B", location=make_location(start_line=2))),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target is None
    assert outcome.candidates == ()
    assert not outcome.is_ambiguous


def test_same_ref_alone_does_not_select_a_target():
    source = make_alert(
        1,
        make_instance(commit_sha="SHA_SRC", location=make_location(path="a.java", start_line=40)),
    )
    candidates = [
        make_alert(7, make_instance(commit_sha="SHA_TGT", location=make_location(path="other.java", start_line=3))),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target is None
    assert outcome.candidates == ()


def test_same_commit_sha_alone_does_not_select_a_target():
    source = make_alert(1, make_instance(analysis_key="src", location=make_location(start_line=1)))
    candidates = [make_alert(2, make_instance(analysis_key="dst", location=make_location(start_line=2)))]

    assert find_matching_alert(source, candidates).target is None


def test_tie_breakers_only_consider_candidates_at_the_source_location():
    # #2 shares the commit but sits elsewhere; #3 is the only one at the location.
    source = make_alert(1, make_instance(commit_sha="SHA_1", analysis_key="src", location=make_location(start_line=9)))
    candidates = [
        make_alert(2, make_instance(commit_sha="SHA_1", analysis_key="dst", location=make_location(start_line=3))),
        make_alert(3, make_instance(commit_sha="SHA_2", analysis_key="dst", location=make_location(start_line=9))),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.target.number == 3
    assert outcome.criterion == "location"


def test_candidates_tied_after_every_tie_breaker_are_ambiguous():
    source = make_alert(1, make_instance(analysis_key="src"))
    candidates = [
        make_alert(3, make_instance(analysis_key="dst_b")),
        make_alert(2, make_instance(analysis_key="dst_a")),
    ]

    outcome = find_matching_alert(source, candidates)

    assert outcome.is_ambiguous
    assert [c.number for c in outcome.candidates] == [2, 3]


def test_identical_candidates_are_ambiguous():
    instance = make_instance()
    source = make_alert(1, instance)

    outcome = find_matching_alert(source, [make_alert(5, instance), make_alert(4, instance)])

    assert outcome.target is None
    assert outcome.is_ambiguous
    assert [c.number for c in outcome.candidates] == [4, 5]


def test_candidates_of_another_rule_are_ignored():
    instance = make_instance()
    source = make_alert(1, instance, rule_id="java/a")

    outcome = find_matching_alert(source, [make_alert(2, instance, rule_id="java/b")])

    assert outcome.target is None


def test_source_without_instance_is_malformed():
    with pytest.raises(MalformedAlertError):
        find_matching_alert(make_alert(1, None), [make_alert(2, make_instance())])


def test_source_without_location_is_malformed():
    instance = AlertInstance(ref="refs/heads/main", state="open", analysis_key="k", commit_sha="s", location=None)

    with pytest.raises(MalformedAlertError, match="no instance location"):
        find_matching_alert(make_alert(1, instance), [])


def test_source_without_rule_id_is_malformed():
    instance = make_instance()

    with pytest.raises(MalformedAlertError, match="no rule id"):
        find_matching_alert(make_alert(1, instance, rule_id=""), [make_alert(2, instance, rule_id="")])


def test_group_candidates_by_rule_drops_unusable_alerts_and_sorts():
    alerts = [
        make_alert(9, make_instance(), rule_id="r1"),
        make_alert(2, make_instance(), rule_id="r1"),
        make_alert(5, None, rule_id="r1"),
        make_alert(3, make_instance(), rule_id="r2"),
        make_alert(4, make_instance(), rule_id=""),
    ]

    grouped = group_candidates_by_rule(alerts)

    assert {rule: [a.number for a in items] for rule, items in grouped.items()} == {"r1": [2, 9], "r2": [3]}
