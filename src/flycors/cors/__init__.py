# Copyright 2026 Firefly Software Solutions Inc.
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
"""FlyCors CORS engine — policy, origin matching, header composition, dispatch."""

from flycors.cors.dispatcher import CorsDispatcher, cors
from flycors.cors.headers import (
    HeaderDirective,
    apply_headers,
    compose_actual_headers,
    compose_preflight_headers,
)
from flycors.cors.origin import (
    Fixed,
    OriginDecision,
    Reflected,
    Wildcard,
    is_origin_allowed,
    match_origin,
    resolve_origin_rule,
)
from flycors.cors.policy import DEFAULT_METHODS, WILDCARD, CorsPolicy, CorsProperties
from flycors.cors.vary import append_vary, vary

__all__ = [
    "DEFAULT_METHODS",
    "WILDCARD",
    "CorsDispatcher",
    "CorsPolicy",
    "CorsProperties",
    "Fixed",
    "HeaderDirective",
    "OriginDecision",
    "Reflected",
    "Wildcard",
    "append_vary",
    "apply_headers",
    "compose_actual_headers",
    "compose_preflight_headers",
    "cors",
    "is_origin_allowed",
    "match_origin",
    "resolve_origin_rule",
    "vary",
]
