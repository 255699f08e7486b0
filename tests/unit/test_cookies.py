# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading
import time

import httpx
import pytest

from hopwire.errors import InvalidCookie
from hopwire.http.cookies import AgentState, ingest_cookies, match_cookies, parse_set_cookie


def _jar(*raw_cookies: str) -> httpx.Cookies:
    jar = httpx.Cookies()
    for raw in raw_cookies:
        jar.jar.set_cookie(parse_set_cookie(raw))
    return jar


def _values(headers):
    return [(h.name, h.value) for h in headers]


def test_domain_is_matched_as_substring_of_hostname():
    jar = _jar("sid=1; Domain=example.com")
    assert _values(match_cookies(jar, "www.example.com", "/", False)) == [("Cookie", "sid=1")]

    other = _jar("sid=1; Domain=other.com")
    assert match_cookies(other, "www.example.com", "/", False) == []


def test_leading_dot_domain_matches_the_bare_host():
    jar = _jar("sid=1; Domain=.example.com")
    assert _values(match_cookies(jar, "example.com", "/", False)) == [("Cookie", "sid=1")]


def test_cookie_without_domain_is_never_sent():
    jar = httpx.Cookies()
    jar.set("sid", "1")
    assert match_cookies(jar, "example.com", "/", False) == []


def test_path_must_prefix_request_path():
    jar = _jar("sid=1; Domain=example.com; Path=/admin")
    assert match_cookies(jar, "example.com", "/public", False) == []
    assert _values(match_cookies(jar, "example.com", "/admin/x", False)) == [("Cookie", "sid=1")]


def test_cookie_without_path_matches_every_path():
    jar = _jar("sid=1; Domain=example.com")
    assert len(match_cookies(jar, "example.com", "/deep/nested/path", False)) == 1


def test_secure_cookie_only_sent_over_https():
    jar = _jar("sid=1; Domain=example.com; Secure")
    assert match_cookies(jar, "example.com", "/", False) == []
    assert _values(match_cookies(jar, "example.com", "/", True)) == [("Cookie", "sid=1")]


def test_bare_tld_domain_over_matches():
    # known limitation: substring matching does not stop public-suffix domains
    jar = _jar("track=1; Domain=.com")
    assert len(match_cookies(jar, "anything.com", "/", False)) == 1


def test_cookie_values_are_decoded_on_ingest_and_encoded_when_rendered():
    jar = _jar("greeting=hello%20world; Domain=example.com")
    (cookie,) = list(jar.jar)
    assert cookie.value == "hello world"
    assert _values(match_cookies(jar, "example.com", "/", False)) == [("Cookie", "greeting=hello%20world")]


def test_rendering_escapes_url_delimiters_in_values():
    jar = _jar("loc=a/b:c@[x]^|; Domain=example.com")
    assert _values(match_cookies(jar, "example.com", "/", False)) == [("Cookie", "loc=a%2Fb%3Ac%40%5Bx%5D%5E%7C")]
    jar = _jar("mix=a!b$c,d; Domain=example.com")
    assert _values(match_cookies(jar, "example.com", "/", False)) == [("Cookie", "mix=a!b$c,d")]


def test_parse_set_cookie_reads_attributes():
    cookie = parse_set_cookie("sid=abc; Domain=example.com; Path=/app; Secure; HttpOnly")
    assert cookie.name == "sid"
    assert cookie.value == "abc"
    assert cookie.domain == ".example.com"
    assert cookie.domain_specified is True
    assert cookie.path == "/app"
    assert cookie.path_specified is True
    assert cookie.secure is True
    assert cookie.has_nonstandard_attr("HttpOnly")


def test_ingest_appends_hostname_domain_when_missing():
    state = AgentState()
    stored = ingest_cookies(state, "h.example", ["sid=1"])
    assert stored == 1
    (cookie,) = list(state.jar.jar)
    assert cookie.domain == ".h.example"
    assert cookie.path_specified is False


def test_ingest_keeps_explicit_domain_case_insensitively():
    state = AgentState()
    ingest_cookies(state, "h.example", ["sid=1; DOMAIN=other.example"])
    (cookie,) = list(state.jar.jar)
    assert cookie.domain == ".other.example"


def test_ingest_ignores_unparseable_cookies_and_keeps_the_rest():
    state = AgentState()
    stored = ingest_cookies(state, "h.example", ["not a cookie", "a=1", "b=2; Path=/x"])
    assert stored == 2
    assert sorted(c.name for c in state.jar.jar) == ["a", "b"]


def test_ingest_replaces_same_name_domain_and_path():
    state = AgentState()
    ingest_cookies(state, "h.example", ["sid=old"])
    ingest_cookies(state, "h.example", ["sid=new"])
    cookies = list(state.jar.jar)
    assert len(cookies) == 1
    assert cookies[0].value == "new"


def test_agent_state_lock_is_released_after_errors():
    state = AgentState()
    try:
        with state.locked():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    acquired = []

    def worker():
        with state.locked():
            acquired.append(True)

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join(timeout=2)
    assert acquired == [True]


def test_unknown_attribute_does_not_detach_the_ones_after_it():
    state = AgentState()
    assert ingest_cookies(state, "h.example", ["sid=abc; Priority=High; Path=/admin; Secure"]) == 1

    (cookie,) = list(state.jar.jar)
    assert (cookie.name, cookie.value) == ("sid", "abc")
    assert cookie.domain == ".h.example"
    assert cookie.path == "/admin"
    assert cookie.secure is True
    assert cookie.get_nonstandard_attr("Priority") == "High"
    assert _values(match_cookies(state.jar, "h.example", "/admin/x", True)) == [("Cookie", "sid=abc")]
    assert match_cookies(state.jar, "h.example", "/admin/x", False) == []


def test_unknown_flag_attribute_is_kept_as_nonstandard():
    state = AgentState()
    assert ingest_cookies(state, "h.example", ["sid=abc; Path=/; Secure; Partitioned"]) == 1
    (cookie,) = list(state.jar.jar)
    assert cookie.secure is True
    assert cookie.has_nonstandard_attr("Partitioned")


def test_expires_with_comma_and_samesite_are_read():
    state = AgentState()
    raw = "id=1; Expires=Wed, 21 Oct 2099 07:28:00 GMT; SameSite=Lax; HttpOnly"
    assert ingest_cookies(state, "h.example", [raw]) == 1
    (cookie,) = list(state.jar.jar)
    assert cookie.value == "1"
    assert cookie.expires is not None and cookie.expires > time.time()
    assert cookie.get_nonstandard_attr("SameSite") == "Lax"
    assert len(match_cookies(state.jar, "h.example", "/", False)) == 1


def test_max_age_sets_expiry_and_zero_deletes():
    state = AgentState()
    assert ingest_cookies(state, "h.example", ["m=1; Max-Age=3600"]) == 1
    (cookie,) = list(state.jar.jar)
    assert cookie.expires is not None and cookie.expires > time.time() + 3000

    assert ingest_cookies(state, "h.example", ["m=1; Max-Age=0"]) == 0
    assert list(state.jar.jar) == []


def test_default_path_comes_from_the_response_url():
    state = AgentState()
    ingest_cookies(state, "h.example", ["sid=1"], "http://h.example/app/login")
    (cookie,) = list(state.jar.jar)
    assert cookie.path == "/app"
    assert cookie.path_specified is False


@pytest.mark.parametrize("raw", ["garbage", "=value", "; Path=/"])
def test_parse_set_cookie_requires_a_name_value_pair(raw):
    with pytest.raises(InvalidCookie):
        parse_set_cookie(raw)
