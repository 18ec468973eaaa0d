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
"""Tests for CorsPolicy — defaults, explicit overrides, fallbacks, config binding."""

from __future__ import annotations

import dataclasses
import re

import pytest

from flycors.core.config import Config
from flycors.cors.policy import DEFAULT_METHODS, WILDCARD, CorsPolicy, CorsProperties


class TestCorsPolicyDefaults:
    def test_defaults(self):
        policy = CorsPolicy()

        assert policy.origin == WILDCARD
        assert policy.methods == ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")
        assert policy.allowed_headers is None
        assert policy.exposed_headers is None
        assert policy.credentials is False
        assert policy.max_age is None
        assert policy.preflight_continue is False
        assert policy.options_success_status == 204

    def test_from_options_without_options_matches_defaults(self):
        assert CorsPolicy.from_options() == CorsPolicy()
        assert CorsPolicy.from_options({}) == CorsPolicy()

    def test_frozen(self):
        policy = CorsPolicy()
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.origin = "https://a.example"  # type: ignore[misc]

    def test_none_means_not_supplied(self):
        policy = CorsPolicy.from_options({"origin": None, "methods": None, "credentials": None})

        assert policy.origin == WILDCARD
        assert policy.methods == DEFAULT_METHODS
        assert policy.credentials is False


class TestExplicitValuesWin:
    def test_explicit_false_origin_is_not_replaced_by_default(self):
        policy = CorsPolicy.from_options({"origin": False})

        assert policy.origin is False
        assert policy.enabled is False

    def test_explicit_false_origin_survives_a_second_instance(self):
        CorsPolicy.from_options({"origin": "https://a.example"})
        policy = CorsPolicy.from_options({"origin": False})
        assert policy.origin is False
        assert CorsPolicy().origin == WILDCARD

    def test_explicit_zero_max_age(self):
        assert CorsPolicy.from_options({"maxAge": 0}).max_age_value() == "0"

    def test_explicit_empty_allowed_headers(self):
        assert CorsPolicy.from_options({"allowedHeaders": []}).allowed_headers == ()

    def test_keyword_overrides_win_over_mapping(self):
        policy = CorsPolicy.from_options({"credentials": True}, credentials=False)
        assert policy.credentials is False


class TestOptionNormalization:
    def test_camel_and_snake_case_keys(self):
        camel = CorsPolicy.from_options(
            {
                "allowedHeaders": "X-Foo",
                "exposedHeaders": ["X-Bar"],
                "maxAge": 60,
                "preflightContinue": True,
                "optionsSuccessStatus": 200,
            }
        )
        snake = CorsPolicy.from_options(
            {
                "allowed_headers": "X-Foo",
                "exposed_headers": ["X-Bar"],
                "max_age": 60,
                "preflight_continue": True,
                "options_success_status": 200,
            }
        )
        assert camel == snake
        assert camel.allowed_headers == ("X-Foo",)
        assert camel.options_success_status == 200

    def test_comma_separated_strings_are_split(self):
        policy = CorsPolicy.from_options({"methods": "GET, POST,,PUT", "exposedHeaders": "X-A,X-B"})

        assert policy.methods == ("GET", "POST", "PUT")
        assert policy.exposed_headers == ("X-A", "X-B")

    def test_headers_alias(self):
        assert CorsPolicy.from_options({"headers": ["X-Foo"]}).allowed_headers == ("X-Foo",)

    def test_allowed_headers_wins_over_alias(self):
        policy = CorsPolicy.from_options({"headers": "X-Alias", "allowedHeaders": "X-Real"})
        assert policy.allowed_headers == ("X-Real",)

    def test_origin_list_is_frozen_to_tuple(self):
        pattern = re.compile(r"\.example$")
        policy = CorsPolicy.from_options({"origin": ["https://a.example", [pattern]]})
        assert policy.origin == ("https://a.example", (pattern,))

    def test_numeric_string_max_age(self):
        assert CorsPolicy(max_age=" 600 ").max_age_value() == "600"

    def test_integral_float_max_age(self):
        assert CorsPolicy(max_age=600.0).max_age_value() == "600"

    def test_resolver_is_kept(self):
        def resolver(origin):
            return True

        assert CorsPolicy(origin=resolver).origin is resolver


class TestMalformedOptionsFallBack:
    @pytest.mark.parametrize(
        ("options", "attribute", "expected"),
        [
            ({"origin": 42}, "origin", WILDCARD),
            ({"origin": ["https://a.example", 42]}, "origin", WILDCARD),
            ({"methods": 5}, "methods", DEFAULT_METHODS),
            ({"credentials": "yes"}, "credentials", False),
            ({"maxAge": "ten minutes"}, "max_age", None),
            ({"maxAge": True}, "max_age", None),
            ({"preflightContinue": 1}, "preflight_continue", False),
            ({"optionsSuccessStatus": 0}, "options_success_status", 204),
            ({"optionsSuccessStatus": "200"}, "options_success_status", 204),
        ],
    )
    def test_falls_back_to_default(self, options, attribute, expected):
        policy = CorsPolicy.from_options(options)
        assert getattr(policy, attribute) == expected

    def test_unknown_keys_are_ignored(self):
        assert CorsPolicy.from_options({"allowOrigins": ["x"]}) == CorsPolicy()


class TestCorsPolicyMerge:
    def test_merge_returns_new_policy(self):
        base = CorsPolicy()
        merged = base.merge(credentials=True, maxAge=30)

        assert merged.credentials is True
        assert merged.max_age == 30
        assert base.credentials is False

    def test_merge_ignores_unknown_fields(self):
        assert CorsPolicy().merge(nonsense=True) == CorsPolicy()

    def test_merge_accepts_headers_alias(self):
        assert CorsPolicy().merge(headers=["X-Foo"]).allowed_headers == ("X-Foo",)

    def test_merge_allowed_headers_beat_alias(self):
        merged = CorsPolicy().merge(headers=["X-Foo"], allowedHeaders="X-Bar")
        assert merged.allowed_headers == ("X-Bar",)

    def test_merge_validates_values(self):
        assert CorsPolicy(max_age=30).merge(maxAge="ten minutes").max_age is None


class TestCorsPolicyFromConfig:
    def test_defaults_without_section(self):
        assert CorsPolicy.from_config(Config({})) == CorsPolicy()

    def test_single_origin_becomes_fixed(self):
        config = Config({"flycors": {"cors": {"allowed_origins": ["https://a.example"]}}})
        assert CorsPolicy.from_config(config).origin == "https://a.example"

    def test_origins_and_patterns_become_list_rule(self):
        config = Config(
            {
                "flycors": {
                    "cors": {
                        "allowed_origins": ["https://a.example", "https://b.example"],
                        "allowed_origin_patterns": [r"^https://.*\.c\.example$"],
                        "allow_credentials": True,
                        "max_age": 600,
                    }
                }
            }
        )
        policy = CorsPolicy.from_config(config)

        assert policy.origin[:2] == ("https://a.example", "https://b.example")
        assert policy.origin[2].pattern == r"^https://.*\.c\.example$"
        assert policy.credentials is True
        assert policy.max_age_value() == "600"

    def test_disabled(self):
        config = Config({"flycors": {"cors": {"enabled": False}}})
        assert CorsPolicy.from_config(config).origin is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FLYCORS_CORS_ALLOWED_ORIGINS", "https://a.example,https://b.example")
        monkeypatch.setenv("FLYCORS_CORS_MAX_AGE", "120")
        props = Config({}).bind(CorsProperties)

        assert props.allowed_origins == ["https://a.example", "https://b.example"]
        assert props.max_age == 120


class TestCorsPolicyFromBadConfig:
    def test_non_numeric_env_max_age_falls_back(self, monkeypatch):
        monkeypatch.setenv("FLYCORS_CORS_MAX_AGE", "ten")
        policy = CorsPolicy.from_config(Config({}))

        assert policy.max_age is None
        assert policy.origin == WILDCARD

    def test_non_numeric_env_status_falls_back(self, monkeypatch):
        monkeypatch.setenv("FLYCORS_CORS_OPTIONS_SUCCESS_STATUS", "ok")
        assert CorsPolicy.from_config(Config({})).options_success_status == 204

    def test_bad_field_does_not_discard_the_others(self, monkeypatch):
        monkeypatch.setenv("FLYCORS_CORS_MAX_AGE", "ten")
        config = Config({"flycors": {"cors": {"allowed_origins": ["https://a.example"], "allow_credentials": True}}})
        policy = CorsPolicy.from_config(config)

        assert policy.origin == "https://a.example"
        assert policy.credentials is True
        assert policy.max_age is None

    def test_invalid_pattern_is_skipped(self):
        config = Config(
            {
                "flycors": {
                    "cors": {
                        "allowed_origins": ["https://a.example", "https://b.example"],
                        "allowed_origin_patterns": ["(", r"^https://.*\.c\.example$"],
                    }
                }
            }
        )
        origin = CorsPolicy.from_config(config).origin

        assert len(origin) == 3
        assert origin[:2] == ("https://a.example", "https://b.example")
        assert origin[2].pattern == r"^https://.*\.c\.example$"

    def test_only_invalid_pattern_leaves_single_origin(self):
        config = Config(
            {"flycors": {"cors": {"allowed_origins": ["https://a.example"], "allowed_origin_patterns": ["("]}}}
        )
        assert CorsPolicy.from_config(config).origin == "https://a.example"

    def test_non_list_origins_fall_back_to_wildcard(self):
        config = Config({"flycors": {"cors": {"allowed_origins": 42}}})
        assert CorsPolicy.from_config(config).origin == WILDCARD

    def test_bind_without_handler_still_raises(self, monkeypatch):
        monkeypatch.setenv("FLYCORS_CORS_MAX_AGE", "ten")
        with pytest.raises(ValueError):
            Config({}).bind(CorsProperties)
