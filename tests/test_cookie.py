"""Tests for crumbjar.cookie — the Cookie value pipeline and lifecycle."""

import time

import pytest

from crumbjar.config import CookieOptions, JarConfig
from crumbjar.context import request_var
from crumbjar.cookie import FIVE_YEARS, Cookie
from crumbjar.errors import ConfigurationError, DecodingError, EncodingError
from crumbjar.http.request import Request
from crumbjar.jar import CookieJar


def _echo(cookie: Cookie) -> Request:
    """A request sending back exactly what the Set-Cookie header carried."""
    pair = cookie.to_set_cookie().to_header_value().split(";")[0]
    name, _, value = pair.partition("=")
    return Request(method="GET", path="/", cookies={name: value})


def _request(**cookies: str) -> Request:
    return Request(method="GET", path="/", cookies=cookies)


@pytest.fixture
def jar() -> CookieJar:
    return CookieJar()


class TestNameResolution:
    def test_name_defaults_to_alias(self, jar: CookieJar) -> None:
        assert Cookie("theme", CookieOptions(), jar).name == "theme"

    def test_explicit_name(self, jar: CookieJar) -> None:
        assert Cookie("theme", CookieOptions(name="ui_theme"), jar).name == "ui_theme"

    def test_jar_salt_is_appended(self) -> None:
        jar = CookieJar(JarConfig(salt="_v1"))
        assert Cookie("session", CookieOptions(), jar).name == "session_v1"

    def test_option_salt_overrides_jar_salt(self) -> None:
        jar = CookieJar(JarConfig(salt="_v1"))
        assert Cookie("session", CookieOptions(salt="_v2"), jar).name == "session_v2"

    def test_dots_become_underscores(self) -> None:
        jar = CookieJar(JarConfig(salt=".v1"))
        assert Cookie("app.session", CookieOptions(), jar).name == "app_session_v1"

    def test_alias_is_unchanged(self) -> None:
        jar = CookieJar(JarConfig(salt=".v1"))
        assert Cookie("app.session", CookieOptions(), jar).alias == "app.session"

    def test_empty_name_raises(self, jar: CookieJar) -> None:
        with pytest.raises(ConfigurationError, match="name"):
            Cookie("", CookieOptions(), jar)

    @pytest.mark.parametrize(
        "alias", ["a; Domain=evil.com", "a=b", "a,b", "a b", "a\r\nSet-Cookie: x", "a\tb"]
    )
    def test_reserved_characters_in_name_raise(self, jar: CookieJar, alias: str) -> None:
        with pytest.raises(ConfigurationError, match="reserved"):
            jar.make(alias, value="x")
        assert alias not in jar

    def test_reserved_characters_from_salt_raise(self) -> None:
        jar = CookieJar(JarConfig(salt="; Secure"))
        with pytest.raises(ConfigurationError, match="reserved"):
            Cookie("session", CookieOptions(), jar)


class TestWriteSide:
    def test_absent_value(self, jar: CookieJar) -> None:
        assert Cookie("a", CookieOptions(), jar).value is None

    def test_string_is_not_json_encoded(self, jar: CookieJar) -> None:
        assert Cookie("a", CookieOptions(value="hello"), jar).value == "hello"

    def test_structure_is_json_encoded(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value={"uid": 42}), jar)
        assert cookie.value == '{"uid":42}'

    def test_unserializable_value_raises(self, jar: CookieJar) -> None:
        with pytest.raises(EncodingError):
            Cookie("a", CookieOptions(value=object()), jar)

    def test_cyclic_value_raises(self, jar: CookieJar) -> None:
        cyclic: list[object] = []
        cyclic.append(cyclic)

        with pytest.raises(EncodingError):
            Cookie("a", CookieOptions(value=cyclic), jar)

    def test_encrypted_value_hides_plaintext(self, jar: CookieJar) -> None:
        cookie = Cookie("tok", CookieOptions(value="top secret", encrypted=True), jar)

        assert cookie.is_encrypted is True
        assert "top secret" not in cookie.value
        assert cookie.decrypt(cookie.value) == "top secret"

    def test_encrypted_accepts_string_flag(self, jar: CookieJar) -> None:
        assert Cookie("tok", CookieOptions(value="abc", encrypted="true"), jar).is_encrypted

    def test_prefix_is_prepended(self, jar: CookieJar) -> None:
        assert Cookie("a", CookieOptions(value="abc", prefix="p_"), jar).value == "p_abc"

    def test_prefix_applied_after_encryption(self, jar: CookieJar) -> None:
        cookie = Cookie("tok", CookieOptions(value="abc", prefix="p_", encrypted=True), jar)

        assert cookie.value.startswith("p_")
        assert cookie.decrypt(cookie.value[2:]) == "abc"

    def test_non_string_prefix_raises(self, jar: CookieJar) -> None:
        with pytest.raises(ConfigurationError, match="prefix"):
            Cookie("a", CookieOptions(value="abc", prefix=123), jar)  # type: ignore[arg-type]

    def test_set_value_reruns_pipeline(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x", prefix="p_"), jar)
        assert cookie.set_value([1, 2]) is cookie
        assert cookie.value == "p_[1,2]"

    @pytest.mark.parametrize("value", [{"a": "x;y"}, "a b", "a,b", "line\nbreak"])
    def test_raw_value_with_reserved_characters_raises(self, value: object) -> None:
        jar = CookieJar(JarConfig(raw=True))
        with pytest.raises(EncodingError, match="Raw cookie"):
            jar.make("d", value=value)

    def test_raw_set_value_with_reserved_characters_raises(self, jar: CookieJar) -> None:
        cookie = Cookie("d", CookieOptions(value="ok", raw=True), jar)

        with pytest.raises(EncodingError):
            cookie.set_value("x;y")
        assert cookie.value == "ok"

    def test_encoded_value_may_carry_reserved_characters(self, jar: CookieJar) -> None:
        cookie = jar.make("d", value={"a": "x;y"})
        assert cookie.http_value(_echo(cookie)) == {"a": "x;y"}

    def test_raw_value_round_trips(self) -> None:
        jar = CookieJar(JarConfig(raw=True))
        cookie = jar.make("d", value={"a": "x"})
        assert cookie.http_value(_echo(cookie)) == {"a": "x"}


class TestAttributes:
    def test_jar_defaults_apply(self) -> None:
        jar = CookieJar(JarConfig(path="/app", domain="example.com", secure=True))
        cookie = Cookie("a", CookieOptions(value="x"), jar)

        assert cookie.path == "/app"
        assert cookie.domain == "example.com"
        assert cookie.secure is True
        assert cookie.httponly is True
        assert cookie.raw is False

    def test_explicit_options_override(self) -> None:
        jar = CookieJar(JarConfig(path="/app", secure=True))
        cookie = Cookie("a", CookieOptions(path="/other", secure=False, httponly="0"), jar)

        assert cookie.path == "/other"
        assert cookie.secure is False
        assert cookie.httponly is False

    def test_path_falls_back_to_root(self, jar: CookieJar) -> None:
        assert Cookie("a", CookieOptions(), jar).path == "/"

    def test_samesite_is_normalized(self, jar: CookieJar) -> None:
        assert Cookie("a", CookieOptions(samesite="Strict"), jar).samesite == "strict"

    def test_invalid_samesite_raises(self, jar: CookieJar) -> None:
        with pytest.raises(ConfigurationError, match="samesite"):
            Cookie("a", CookieOptions(samesite="sometimes"), jar)

    def test_session_cookie_by_default(self, jar: CookieJar) -> None:
        assert Cookie("a", CookieOptions(value="x"), jar).expires == 0

    def test_lifetime_from_options(self, jar: CookieJar) -> None:
        before = int(time.time())
        cookie = Cookie("a", CookieOptions(value="x", lifetime=60), jar)
        assert before + 60 <= cookie.expires <= int(time.time()) + 60


class TestHttpValue:
    def test_absent_cookie(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        assert cookie.http_value(_request(other="y")) is None

    def test_empty_cookie_is_absent(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        assert cookie.http_value(_request(a="")) is None

    def test_plain_string(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="hello world"), jar)
        assert cookie.http_value(_echo(cookie)) == "hello world"

    @pytest.mark.parametrize(
        "value",
        [{"uid": 42}, [1, "two", None], {"nested": {"ok": True}}, 3.5, "ünïcödé"],
    )
    def test_json_values_decode(self, jar: CookieJar, value: object) -> None:
        cookie = Cookie("a", CookieOptions(value=value), jar)
        decoded = cookie.http_value(_echo(cookie))
        assert decoded == (str(value) if isinstance(value, float) else value)

    def test_numeric_string_is_not_json_decoded(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value=42), jar)
        assert cookie.http_value(_echo(cookie)) == "42"

    def test_numeric_with_exponent_stays_string(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.http_value(_request(a="1e3")) == "1e3"

    def test_malformed_json_is_plain_string(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.http_value(_request(a="{not json")) == "{not json"

    def test_nan_literal_is_plain_string(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.http_value(_request(a="NaN")) == "NaN"

    def test_percent_decoding(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.http_value(_request(a="a%20b")) == "a b"

    def test_raw_cookie_skips_percent_decoding(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(raw=True), jar)
        assert cookie.http_value(_request(a="a%20b")) == "a%20b"

    def test_prefix_is_stripped(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="abc", prefix="p_"), jar)

        request = _echo(cookie)
        assert request.cookies["a"].startswith("p_")
        assert cookie.http_value(request) == "abc"

    def test_encrypted_round_trip(self, jar: CookieJar) -> None:
        cookie = Cookie("tok", CookieOptions(value="abc", encrypted=True), jar)

        request = _echo(cookie)
        assert request.cookies["tok"] != "abc"
        assert cookie.http_value(request) == "abc"

    def test_encrypted_prefixed_structure_round_trip(self, jar: CookieJar) -> None:
        cookie = Cookie(
            "cart",
            CookieOptions(value={"items": [1, 2]}, encrypted=True, prefix="c:"),
            jar,
        )
        assert cookie.http_value(_echo(cookie)) == {"items": [1, 2]}

    def test_same_alias_shares_key(self, jar: CookieJar) -> None:
        writer = Cookie("tok", CookieOptions(value="abc", encrypted=True, path="/a"), jar)
        reader = Cookie("tok", CookieOptions(encrypted=True, path="/b"), jar)
        assert reader.http_value(_echo(writer)) == "abc"

    def test_tampered_value_raises(self, jar: CookieJar) -> None:
        cookie = Cookie("tok", CookieOptions(value="abc", encrypted=True), jar)

        with pytest.raises(DecodingError):
            cookie.http_value(_request(tok="gAAAAAtampered"))

    def test_uses_current_request(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        token = request_var.set(_request(a="from-context"))
        try:
            assert cookie.http_value() == "from-context"
        finally:
            request_var.reset(token)

    def test_no_current_request_raises(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        with pytest.raises(LookupError):
            cookie.http_value()


class TestCheckRequestValue:
    def test_matches_configured_value(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value={"uid": 42}), jar)
        assert cookie.check_request_value(_echo(cookie)) is True

    def test_explicit_value(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.check_request_value(_request(a="yes"), "yes") is True
        assert cookie.check_request_value(_request(a="yes"), "no") is False

    @pytest.mark.parametrize("value", [42, 3.5, "42", True, "[1]"])
    def test_matches_own_wire_value(self, jar: CookieJar, value: object) -> None:
        cookie = jar.make("n", value=value)
        request = Request(method="GET", path="/", cookies={"n": cookie.value})
        assert cookie.check_request_value(request) is True

    def test_numeric_explicit_value(self, jar: CookieJar) -> None:
        cookie = Cookie("n", CookieOptions(), jar)
        assert cookie.check_request_value(_request(n="42"), 42) is True
        assert cookie.check_request_value(_request(n="43"), 42) is False

    def test_cookie_without_value_is_false(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.check_request_value(_request(a="x")) is False

    def test_absent_is_false(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        assert cookie.check_request_value(_request()) is False


class TestLifecycle:
    def test_clear(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x", lifetime=3600), jar)
        now = int(time.time())

        assert cookie.clear() is cookie
        assert cookie.value is None
        assert now - FIVE_YEARS - 1 <= cookie.expires <= now - FIVE_YEARS + 1
        assert str(cookie).startswith("a=deleted")

    def test_never(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        now = int(time.time())

        assert cookie.never() is cookie
        assert now + FIVE_YEARS - 1 <= cookie.expires <= now + FIVE_YEARS + 1
        assert cookie.value == "x"

    def test_queue_and_unqueue(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(), jar)
        assert cookie.is_queued is False

        assert cookie.queue() is cookie
        assert cookie.is_queued is True
        cookie.queue()
        assert cookie.is_queued is True

        assert cookie.unqueue() is cookie
        assert cookie.is_queued is False

    def test_str_is_header_value(self, jar: CookieJar) -> None:
        cookie = Cookie("a", CookieOptions(value="x"), jar)
        assert str(cookie) == cookie.to_set_cookie().to_header_value()
