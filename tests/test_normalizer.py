"""Tests for post-crawl policy normalization."""

from __future__ import annotations

from cspgen.policy.aggregator import new_policy
from cspgen.policy.directives import Directive
from cspgen.policy.normalizer import normalize, normalize_sources

BASE = "https://example.com"


def _policy(**directives: set[str]):
    policy = new_policy()
    for name, tokens in directives.items():
        policy[Directive(name.replace("_", "-"))] = set(tokens)
    return policy


class TestSelfInjection:
    def test_populated_directive_gains_self(self):
        result = normalize(_policy(script_src={"https://cdn.example.net"}), BASE)
        assert result[Directive.SCRIPT_SRC] == {"'self'", "https://cdn.example.net"}

    def test_self_not_duplicated(self):
        result = normalize(_policy(img_src={"'self'", "data:"}), BASE)
        assert result[Directive.IMG_SRC] == {"'self'", "data:"}

    def test_empty_directive_stays_empty(self):
        result = normalize(new_policy(), BASE)
        assert result[Directive.MEDIA_SRC] == set()

    def test_default_src_keeps_self_on_empty_page(self):
        result = normalize(new_policy(), BASE)
        assert result[Directive.DEFAULT_SRC] == {"'self'"}


class TestWildcardRedundancy:
    def test_specific_host_under_wildcard_removed(self):
        tokens = {"https://*.jsdelivr.net", "https://cdn.jsdelivr.net"}
        result = normalize(_policy(script_src=tokens), BASE)
        assert result[Directive.SCRIPT_SRC] == {"'self'", "https://*.jsdelivr.net"}

    def test_host_with_matching_wildcard_form_removed(self):
        tokens = {"https://*.cdn.example.net", "https://cdn.example.net"}
        result = normalize_sources(tokens, BASE)
        assert result == {"'self'", "https://*.cdn.example.net"}

    def test_scheme_must_match(self):
        tokens = {"https://*.jsdelivr.net", "http://cdn.jsdelivr.net"}
        result = normalize_sources(tokens, BASE)
        assert "http://cdn.jsdelivr.net" in result

    def test_explicit_port_not_covered(self):
        tokens = {"https://*.jsdelivr.net", "https://cdn.jsdelivr.net:8443"}
        result = normalize_sources(tokens, BASE)
        assert "https://cdn.jsdelivr.net:8443" in result

    def test_unrelated_host_kept(self):
        tokens = {"https://*.jsdelivr.net", "https://unpkg.com"}
        result = normalize_sources(tokens, BASE)
        assert "https://unpkg.com" in result

    def test_redundancy_is_per_directive(self):
        policy = _policy(
            script_src={"https://*.jsdelivr.net"},
            style_src={"https://cdn.jsdelivr.net"},
        )
        result = normalize(policy, BASE)
        assert result[Directive.STYLE_SRC] == {"'self'", "https://cdn.jsdelivr.net"}


class TestBaseOriginRemoval:
    def test_literal_base_origin_removed(self):
        result = normalize(_policy(connect_src={BASE, "https://api.example.com"}), BASE)
        assert result[Directive.CONNECT_SRC] == {"'self'", "https://api.example.com"}

    def test_keywords_and_schemes_never_removed(self):
        tokens = {"'self'", "'unsafe-inline'", "data:", "blob:"}
        assert normalize_sources(tokens, BASE) == tokens


class TestPurity:
    def test_input_not_mutated(self):
        policy = _policy(script_src={"https://cdn.example.net"})
        normalize(policy, BASE)
        assert policy[Directive.SCRIPT_SRC] == {"https://cdn.example.net"}

    def test_idempotent(self):
        policy = _policy(
            script_src={"https://*.jsdelivr.net", "https://cdn.jsdelivr.net", BASE},
            img_src={"data:"},
            connect_src={"https://api.example.com"},
            frame_src={"https://www.youtube.com"},
        )
        once = normalize(policy, BASE)
        twice = normalize(once, BASE)
        assert twice == once
