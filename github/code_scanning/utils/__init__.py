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

"""Code scanning migration utilities.

Modules
-------
models                 Migration dataclasses and errors (MigrationSummary, AlertMatch).
alert_matching         Ordered equivalence criteria pairing source and target alerts.
analysis_replicator    SARIF replay of source default-branch analyses onto the target.
alert_reconciler       Source-to-target alert state mirroring.
code_scanning_service  ``CodeScanningService`` facade used by the migration command.
"""
