"""Tests for request URL -> source token resolution."""

from __future__ import annotations

import pytest

from cspgen.policy.origin import OriginResolver, match_wildcard_domain, origin_of, resolve

BASE = "https://example.com"


class TestOriginOf:
    def test_drops_path_and_query(self):
        assert origin_of("https://example.com/app.js?v=1#x") == "https://example.com"

    def test_default_port_dropped(self):
        assert origin_of("https://example.com:443/") == "https://example.com"
        assert origin_of("http://example.com:80/") == "http://example.com"

    def test_explicit_port_kept(self):
        assert origin_of("https://api.example.com:8443/x") == "https://api.example.com:8443"

    def test_scheme_and_host_lowercased(self):
        assert origin_of("HTTPS://CDN.Example.COM/a") == "https://cdn.example.com"

    def test_ipv6_host_bracketed(self):
        assert origin_of("http://[::1]:3000/") == "http://[::1]:3000"

    def test_unparsable(self):
        assert origin_of("not a url") is None
        assert origin_of("") is None
        assert origin_of("http://[::1/") is None
        assert origin_of("https://example.com:99999/") is None


class TestResolveSameOrigin:
    def test_same_origin_is_self(self):
        assert resolve("https://example.com/app.js", BASE, ()) == "'self'"

    def test_same_origin_with_default_port_is_self(self):
        assert resolve("https://example.com:443/logo.png", BASE, ()) == "'self'"

    def test_same_origin_even_when_host_in_wildcard_table(self):
        base = "https://cdn.jsdelivr.net"
        assert resolve("https://cdn.jsdelivr.net/lib.js", base, ("jsdelivr.net",)) == "'self'"

    def test_different_scheme_is_not_self(self):
        assert resolve("http://example.com/app.js", BASE, ()) == "http://example.com"

    def test_different_port_is_not_self(self):
        assert resolve("https://example.com:8443/api", BASE, ()) == "https://example.com:8443"


class TestResolveWildcards:
    def test_subdomain_generalized(self, wildcard_table):
        token = resolve("https://cdn.jsdelivr.net/lib.js", BASE, wildcard_table, True)
        assert token == "https://*.jsdelivr.net"

    def test_apex_domain_not_generalized(self, wildcard_table):
        token = resolve("https://jsdelivr.net/lib.js", BASE, wildcard_table, True)
        assert token == "https://jsdelivr.net"

    def test_wildcard_mode_off_keeps_literal_origin(self, wildcard_table):
        token = resolve("https://cdn.jsdelivr.net/lib.js", BASE, wildcard_table, False)
        assert token == "https://cdn.jsdelivr.net"

    def test_unlisted_domain_keeps_literal_origin(self, wildcard_table):
        token = resolve("https://api.example.org/data", BASE, wildcard_table, True)
        assert token == "https://api.example.org"

    def test_scheme_preserved(self, wildcard_table):
        token = resolve("http://a.b.cdn.test/x", BASE, wildcard_table, True)
        assert token == "http://*.cdn.test"

    def test_first_match_wins(self):
        table = ("gstatic.com", "fonts.gstatic.com")
        token = resolve("https://fonts.gstatic.com/s/a.woff2", BASE, table, True)
        assert token == "https://*.gstatic.com"

    def test_first_match_wins_reversed(self):
        table = ("fonts.gstatic.com", "gstatic.com")
        token = resolve("https://fonts.gstatic.com/s/a.woff2", BASE, table, True)
        assert token == "https://fonts.gstatic.com"

    def test_synthetic_table(self):
        token = resolve("https://edge-7.widgets.invalid/w.js", BASE, ("widgets.invalid",), True)
        assert token == "https://*.widgets.invalid"


class TestResolveUnparsable:
    @pytest.mark.parametrize("url", ["::::", "no-scheme-here", "", "https://", "http://[bad"])
    def test_returns_none(self, url):
        assert resolve(url, BASE, ("jsdelivr.net",)) is None


class TestMatchWildcardDomain:
    def test_suffix_match(self):
        assert match_wildcard_domain("a.cdn.test", ("cdn.test",)) == "cdn.test"

    def test_no_match(self):
        assert match_wildcard_domain("example.com", ("cdn.test",)) is None


class TestOriginResolver:
    def test_for_target_computes_base_origin(self):
        resolver = OriginResolver.for_target("https://example.com:443/index.html")
        assert resolver.base_origin == "https://example.com"

    def test_for_target_rejects_unparsable(self):
        with pytest.raises(ValueError):
            OriginResolver.for_target("not a url")

    def test_bound_resolve(self, wildcard_table):
        resolver = OriginResolver(BASE, wildcard_table, wildcard_mode=True)
        assert resolver.resolve("https://example.com/a") == "'self'"
        assert resolver.resolve("https://cdn.jsdelivr.net/a") == "https://*.jsdelivr.net"
