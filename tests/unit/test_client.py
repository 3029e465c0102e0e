"""
SimpleHttp Client Unit Tests
"""

import logging
from concurrent.futures import Future

import pytest
import requests

import simplehttp
from simplehttp import SimpleHttp
from simplehttp.config import ClientConfig
from simplehttp.exceptions import (
    InternalError,
    InvalidArgumentsError,
    ProfileError,
    ValidationError,
)
from simplehttp.models import SAVED_TO_FILE, RawResponse, Response


class StubRuntime:
    """Records calls and replays a canned reply"""

    def __init__(self, reply=None, error=None, start_error=None, options_error=None):
        self.reply = reply
        self.error = error
        self.start_error = start_error
        self.options_error = options_error
        self.started = []
        self.applied = []
        self.calls = []
        self.stopped = []
        self.shut_down = False

    def start(self, name):
        if self.start_error:
            raise self.start_error
        self.started.append(name)

    def set_options(self, name, options):
        if self.options_error:
            raise self.options_error
        self.applied.append((name, dict(options)))

    def request(self, method, url, headers, content_type, body, http_options, options, profile):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers,
            "content_type": content_type,
            "body": body,
            "http_options": http_options,
            "options": options,
            "profile": profile,
        })
        if self.error:
            raise self.error
        return self.reply

    def stop(self, name):
        self.stopped.append(name)
        return True

    def shutdown(self):
        self.shut_down = True


OK_REPLY = RawResponse(200, "OK", [("content-type", "text/plain"), ("x-id", "7")], "hello")


@pytest.fixture
def runtime() -> StubRuntime:
    return StubRuntime(reply=OK_REPLY)


@pytest.fixture
def client(runtime: StubRuntime) -> SimpleHttp:
    return SimpleHttp(runtime=runtime)


class TestRequest:
    """Tests for issuing requests"""

    def test_success(self, client: SimpleHttp, runtime: StubRuntime):
        """Should map the runtime reply into a Response"""
        result = client.get("http://x")

        assert result.ok is True
        assert result.response == Response(
            status=200,
            status_line="OK",
            headers=[("content-type", "text/plain"), ("x-id", "7")],
            body="hello",
            profile="default",
        )
        assert runtime.started == ["default"]
        assert runtime.calls[0]["method"] == "GET"
        assert runtime.calls[0]["url"] == "http://x"
        assert runtime.calls[0]["profile"] == "default"

    @pytest.mark.parametrize(
        "verb", ["get", "post", "delete", "put", "options", "head", "patch", "trace"]
    )
    def test_verbs(self, client: SimpleHttp, runtime: StubRuntime, verb: str):
        """Should dispatch each verb with its method name"""
        getattr(client, verb)("http://x")
        assert runtime.calls[0]["method"] == verb.upper()

    def test_passes_request_description(self, client: SimpleHttp, runtime: StubRuntime):
        """Should hand headers, content type, body and options to the runtime"""
        client.post(
            "http://x",
            {
                "headers": {"Content-Type": "application/json", "X-Foo": "bar"},
                "body": '{"a": 1}',
                "timeout": 2000,
                "body_format": "binary",
            },
        )
        call = runtime.calls[0]
        assert call["headers"] == [("X-Foo", "bar")]
        assert call["content_type"] == "application/json"
        assert call["body"] == '{"a": 1}'
        assert call["http_options"] == {"timeout": 2000}
        assert call["options"] == {"body_format": "binary"}

    def test_keyword_options_override(self, client: SimpleHttp, runtime: StubRuntime):
        """Keyword options should override the options mapping"""
        client.get("http://x", {"timeout": 1000}, timeout=3000)
        assert runtime.calls[0]["http_options"] == {"timeout": 3000}

    def test_unknown_option_sends_nothing(self, client: SimpleHttp, runtime: StubRuntime):
        """Should fail before starting a profile or dispatching"""
        with pytest.raises(InvalidArgumentsError) as exc_info:
            client.get("http://x", foo=1)

        assert "foo" in str(exc_info.value)
        assert runtime.started == []
        assert runtime.calls == []

    def test_invalid_url(self, client: SimpleHttp, runtime: StubRuntime):
        """Should reject a non-string URL before dispatching"""
        with pytest.raises(ValidationError):
            client.get(None)
        assert runtime.calls == []


class TestProfiles:
    """Tests for connection profile selection"""

    def test_named_profile(self, client: SimpleHttp, runtime: StubRuntime):
        """Should start and use the named profile"""
        result = client.get("http://x", profile="crawler")
        assert runtime.started == ["crawler"]
        assert runtime.calls[0]["profile"] == "crawler"
        assert result.response.profile == "crawler"

    def test_profile_options_applied(self, client: SimpleHttp, runtime: StubRuntime):
        """Should apply profile options to the resolved profile"""
        client.get("http://x", profile="crawler", cookies="disabled", max_sessions=2)
        assert runtime.applied == [("crawler", {"cookies": "disabled", "max_sessions": 2})]

    def test_no_profile_options(self, client: SimpleHttp, runtime: StubRuntime):
        """Should not call set_options without profile options"""
        client.get("http://x")
        assert runtime.applied == []

    def test_start_failure(self):
        """Should raise ProfileError embedding the runtime's reason"""
        runtime = StubRuntime(start_error=ValueError("boom"))
        client = SimpleHttp(runtime=runtime)

        with pytest.raises(ProfileError) as exc_info:
            client.get("http://x", profile="broken")

        assert "boom" in str(exc_info.value)
        assert exc_info.value.profile == "broken"

    def test_option_apply_failure(self):
        """Should raise ValidationError embedding the runtime's reason"""
        runtime = StubRuntime(reply=OK_REPLY, options_error=ValueError("bad cookies"))
        client = SimpleHttp(runtime=runtime)

        with pytest.raises(ValidationError) as exc_info:
            client.get("http://x", cookies="sometimes")

        assert "bad cookies" in str(exc_info.value)
        assert runtime.calls == []

    def test_invalid_transport_option(self):
        """ValueError from dispatch should surface as ValidationError"""
        runtime = StubRuntime(error=ValueError("Unsupported HTTP version: 'HTTP/2'"))
        client = SimpleHttp(runtime=runtime)

        with pytest.raises(ValidationError) as exc_info:
            client.get("http://x", version="HTTP/2")

        assert "HTTP/2" in str(exc_info.value)


class TestOutcomes:
    """Tests for reply normalization"""

    def test_transport_failure_is_returned(self):
        """Should return the runtime's error unchanged"""
        error = requests.ConnectionError("refused")
        client = SimpleHttp(runtime=StubRuntime(error=error))

        result = client.get("http://x")

        assert result.ok is False
        assert result.error is error
        assert result.response is None
        with pytest.raises(requests.ConnectionError):
            result.unwrap()

    def test_invalid_url_from_runtime_is_transport_failure(self):
        """requests' own URL errors should be passed through, not raised"""
        error = requests.exceptions.MissingSchema("no scheme")
        client = SimpleHttp(runtime=StubRuntime(error=error))

        result = client.get("not-a-url")

        assert result.error is error

    def test_unwritable_stream_target_is_returned(self):
        """A file error while saving the body should come back as a failure"""
        error = FileNotFoundError(2, "No such file or directory")
        client = SimpleHttp(runtime=StubRuntime(error=error))

        result = client.get("http://x", stream="/missing/out.bin")

        assert result.ok is False
        assert result.error is error

    def test_saved_to_file(self):
        """Should map the saved-to-file outcome to a 200 response"""
        client = SimpleHttp(runtime=StubRuntime(reply=SAVED_TO_FILE))

        result = client.get("http://x", stream="/tmp/out.bin", profile="dl")

        assert result.response.status == 200
        assert result.response.body is SAVED_TO_FILE
        assert result.response.saved_to_file is True
        assert result.response.profile == "dl"

    def test_async_reference(self):
        """Should hand back the runtime's future for sync=False"""
        future = Future()
        client = SimpleHttp(runtime=StubRuntime(reply=future))

        result = client.get("http://x", sync=False)

        assert result.ref is future
        assert result.response is None
        assert result.ok is True

    def test_binary_body(self):
        """Should pass bytes bodies through"""
        reply = RawResponse(200, "OK", [], b"\x00\x01")
        client = SimpleHttp(runtime=StubRuntime(reply=reply))
        assert client.get("http://x").response.body == b"\x00\x01"

    def test_unexpected_body(self):
        """Should raise InternalError for a body of the wrong shape"""
        reply = RawResponse(200, "OK", [], 42)
        client = SimpleHttp(runtime=StubRuntime(reply=reply))

        with pytest.raises(InternalError):
            client.get("http://x")

    def test_unexpected_reply(self):
        """Should raise InternalError for an unknown reply"""
        client = SimpleHttp(runtime=StubRuntime(reply=("ok", 200)))

        with pytest.raises(InternalError):
            client.get("http://x")


class TestHeadersFormat:
    """Tests for response header formatting"""

    @pytest.fixture
    def raw_client(self) -> SimpleHttp:
        reply = RawResponse(200, "OK", [(b"X-Raw", b"v\xe9"), ("x-num", 5)], "")
        return SimpleHttp(runtime=StubRuntime(reply=reply))

    def test_binary(self, raw_client: SimpleHttp):
        """Should coerce names and values to text pairs"""
        result = raw_client.get("http://x", headers_format="binary")
        assert result.response.headers == [("X-Raw", "v\xe9"), ("x-num", "5")]

    def test_map(self, raw_client: SimpleHttp):
        """Should build a case-insensitive mapping"""
        result = raw_client.get("http://x", headers_format="map")
        assert result.response.headers["x-raw"] == "v\xe9"
        assert result.response.headers["X-NUM"] == "5"

    def test_pass_through(self, raw_client: SimpleHttp):
        """Should leave the runtime's representation untouched"""
        result = raw_client.get("http://x")
        assert result.response.headers == [(b"X-Raw", b"v\xe9"), ("x-num", 5)]


class TestClose:
    """Tests for profile teardown"""

    def test_close_none(self, client: SimpleHttp, runtime: StubRuntime):
        """Closing None should be a no-op success"""
        assert client.close(None) is True
        assert runtime.stopped == []

    def test_close_default(self, client: SimpleHttp, runtime: StubRuntime):
        """Closing the default profile should point at shutdown()"""
        with pytest.raises(ValidationError) as exc_info:
            client.close("default")
        assert "shutdown()" in str(exc_info.value)
        assert runtime.stopped == []

    def test_close_named(self, client: SimpleHttp, runtime: StubRuntime):
        """Should stop the named profile"""
        assert client.close("crawler") is True
        assert runtime.stopped == ["crawler"]

    def test_close_response(self, client: SimpleHttp, runtime: StubRuntime):
        """Should close the profile a response was issued from"""
        result = client.get("http://x", profile="crawler")
        client.close(result.response)
        assert runtime.stopped == ["crawler"]

    def test_close_response_from_default(self, client: SimpleHttp):
        """A response from the default profile should not close it"""
        result = client.get("http://x")
        with pytest.raises(ValidationError):
            client.close(result.response)

    def test_context_manager(self, runtime: StubRuntime):
        """Should shut the runtime down on exit"""
        with SimpleHttp(runtime=runtime) as client:
            client.get("http://x")
        assert runtime.shut_down is True


class TestConfigDefaults:
    """Tests for configuration defaults"""

    def test_default_timeouts(self, runtime: StubRuntime):
        """Should fill in configured timeouts"""
        client = SimpleHttp(ClientConfig(timeout=5000, connect_timeout=1000), runtime=runtime)
        client.get("http://x", timeout=7000)
        assert runtime.calls[0]["http_options"] == {"timeout": 7000, "connect_timeout": 1000}

    def test_default_headers_format(self, runtime: StubRuntime):
        """Should apply the configured headers format"""
        client = SimpleHttp(ClientConfig(headers_format="map"), runtime=runtime)
        result = client.get("http://x")
        assert result.response.headers["Content-Type"] == "text/plain"

    def test_custom_default_profile(self, runtime: StubRuntime):
        """Should use and protect the configured default profile"""
        client = SimpleHttp(ClientConfig(default_profile="shared"), runtime=runtime)
        client.get("http://x")
        assert runtime.started == ["shared"]
        with pytest.raises(ValidationError):
            client.close("shared")


class TestDebug:
    """Tests for debug output"""

    def test_debug_logs_request_and_response(self, runtime: StubRuntime, caplog):
        """Should emit the request and the raw reply to the injected logger"""
        sink = logging.getLogger("tests.simplehttp.debug")
        client = SimpleHttp(runtime=runtime, logger=sink)

        with caplog.at_level(logging.INFO, logger="tests.simplehttp.debug"):
            result = client.get("http://x", debug=True)

        assert result.ok is True
        messages = [r.getMessage() for r in caplog.records if r.name == sink.name]
        assert len(messages) == 2
        assert messages[0].startswith("Request: ")
        assert "http://x" in messages[0]
        assert messages[1].startswith("Response: ")
        assert "hello" in messages[1]

    def test_no_debug_output_by_default(self, client: SimpleHttp, caplog):
        """Should stay quiet without the debug flag"""
        with caplog.at_level(logging.INFO):
            client.get("http://x")
        assert not any(r.getMessage().startswith("Request: ") for r in caplog.records)


class TestModuleApi:
    """Tests for the module-level functions"""

    def test_close_none(self):
        assert simplehttp.close(None) is True

    def test_close_default(self):
        """Should refuse to close the default profile"""
        with pytest.raises(ValidationError):
            simplehttp.close(simplehttp.DEFAULT_PROFILE)

    def test_unknown_option(self):
        """Should reject unknown options without network activity"""
        with pytest.raises(InvalidArgumentsError):
            simplehttp.get("http://x", foo=1)
