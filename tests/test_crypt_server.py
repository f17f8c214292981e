from __future__ import annotations

import base64
import socket
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs

import httpx
import pytest

from adapters.crypt_server import CryptServerEscrow, submit
from core.config import AppSettings
from core.domain.models import EscrowRecord, ServerEndpoint
from core.errors import EscrowTransportError
from core.interfaces.escrow import EscrowBackend


def _record(**overrides):
    data = {
        "recovery_password": "2345.1234.6566.foo",
        "serial_number": "1234foobar",
        "hostname": "testing.example.com",
        "username": "tester",
    }
    data.update(overrides)
    return EscrowRecord(**data)


def _settings():
    return AppSettings(_env_file=None)


class _Recorder:
    def __init__(self, status_code=200):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="ok")


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode("ascii"), keep_blank_values=True, strict_parsing=True)


def test_post_without_basic_auth():
    recorder = _Recorder()
    endpoint = ServerEndpoint(base_url="http://crypt.test", uri_path="/checkin/")

    resp = submit(_record(), endpoint, settings=_settings(), transport=httpx.MockTransport(recorder))

    assert resp.status_code == 200
    assert len(recorder.requests) == 1
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/checkin/"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert "authorization" not in request.headers
    assert _form(request) == {
        "recovery_password": ["2345.1234.6566.foo"],
        "serial": ["1234foobar"],
        "macname": ["testing.example.com"],
        "username": ["tester"],
    }


def test_post_with_basic_auth():
    recorder = _Recorder()
    endpoint = ServerEndpoint(
        base_url="http://crypt.test",
        uri_path="/checkin/",
        auth_username="DarthHelmet",
        auth_password="12345",
    )

    resp = submit(_record(), endpoint, settings=_settings(), transport=httpx.MockTransport(recorder))

    assert resp.status_code == 200
    header = recorder.requests[0].headers["authorization"]
    scheme, _, token = header.partition(" ")
    assert scheme == "Basic"
    assert base64.b64decode(token).decode("utf-8") == "DarthHelmet:12345"


@pytest.mark.parametrize(
    ("auth_username", "auth_password"),
    [("DarthHelmet", None), (None, "12345"), ("DarthHelmet", ""), ("", "12345")],
)
def test_partial_credentials_send_no_authorization(auth_username, auth_password):
    recorder = _Recorder()
    endpoint = ServerEndpoint(
        base_url="http://crypt.test",
        auth_username=auth_username,
        auth_password=auth_password,
    )

    submit(_record(), endpoint, settings=_settings(), transport=httpx.MockTransport(recorder))

    assert "authorization" not in recorder.requests[0].headers


def test_awkward_values_survive_form_encoding():
    recorder = _Recorder()
    record = _record(
        recovery_password="a b&c=d%e+f",
        serial_number="",
        hostname="host name/ü",
        username="",
    )

    submit(
        record,
        ServerEndpoint(base_url="http://crypt.test"),
        settings=_settings(),
        transport=httpx.MockTransport(recorder),
    )

    assert _form(recorder.requests[0]) == {
        "recovery_password": ["a b&c=d%e+f"],
        "serial": [""],
        "macname": ["host name/ü"],
        "username": [""],
    }


def test_error_status_is_returned_not_raised():
    recorder = _Recorder(status_code=500)

    resp = submit(
        _record(),
        ServerEndpoint(base_url="http://crypt.test"),
        settings=_settings(),
        transport=httpx.MockTransport(recorder),
    )

    assert resp.status_code == 500
    assert resp.text == "ok"


def test_target_is_plain_concatenation():
    recorder = _Recorder()
    endpoint = ServerEndpoint(base_url="http://crypt.test/api", uri_path="/v2/checkin/")

    submit(_record(), endpoint, settings=_settings(), transport=httpx.MockTransport(recorder))

    assert str(recorder.requests[0].url) == "http://crypt.test/api/v2/checkin/"


def test_transport_failure_raises_escrow_transport_error():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    endpoint = ServerEndpoint(base_url="http://crypt.test")

    with pytest.raises(EscrowTransportError) as excinfo:
        submit(_record(), endpoint, settings=_settings(), transport=httpx.MockTransport(refuse))

    assert excinfo.value.url == "http://crypt.test/checkin/"
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_timeout_raises_escrow_transport_error():
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(EscrowTransportError):
        submit(
            _record(),
            ServerEndpoint(base_url="http://crypt.test"),
            settings=_settings(),
            transport=httpx.MockTransport(slow),
        )


def test_malformed_url_raises_escrow_transport_error():
    endpoint = ServerEndpoint(base_url="http://[::1")

    with pytest.raises(EscrowTransportError) as excinfo:
        submit(_record(), endpoint, settings=_settings(), transport=httpx.MockTransport(_Recorder()))

    assert isinstance(excinfo.value.__cause__, httpx.InvalidURL)


def test_undecodable_body_raises_escrow_transport_error():
    def corrupt_gzip(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"notgzip")

    with pytest.raises(EscrowTransportError) as excinfo:
        submit(
            _record(),
            ServerEndpoint(base_url="http://crypt.test"),
            settings=_settings(),
            transport=httpx.MockTransport(corrupt_gzip),
        )

    assert isinstance(excinfo.value.__cause__, httpx.DecodingError)


def test_backend_delegates_to_submit():
    recorder = _Recorder()
    endpoint = ServerEndpoint(base_url="http://crypt.test")
    backend = CryptServerEscrow(endpoint, _settings(), transport=httpx.MockTransport(recorder))

    assert isinstance(backend, EscrowBackend)
    assert backend.endpoint is endpoint
    assert backend.escrow(_record()).status_code == 200
    assert recorder.requests[0].url.path == "/checkin/"


class _CheckinHandler(BaseHTTPRequestHandler):
    seen: list[dict] = []

    def do_POST(self):  # noqa: N802
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length).decode("ascii")
        self.seen.append(
            {
                "path": self.path,
                "content_type": self.headers.get("Content-Type"),
                "authorization": self.headers.get("Authorization"),
                "form": parse_qs(body, keep_blank_values=True),
            }
        )
        self.send_response(200)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):  # noqa: A002
        pass


@pytest.fixture
def checkin_server(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    _CheckinHandler.seen = []
    server = HTTPServer(("127.0.0.1", 0), _CheckinHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_real_server_observes_form_and_auth(checkin_server):
    endpoint = ServerEndpoint(
        base_url=checkin_server,
        auth_username="DarthHelmet",
        auth_password="12345",
    )

    resp = submit(_record(), endpoint, settings=_settings())

    assert resp.status_code == 200
    assert len(_CheckinHandler.seen) == 1
    seen = _CheckinHandler.seen[0]
    assert seen["path"] == "/checkin/"
    assert seen["content_type"] == "application/x-www-form-urlencoded"
    assert seen["authorization"] == "Basic " + base64.b64encode(b"DarthHelmet:12345").decode("ascii")
    assert seen["form"]["macname"] == ["testing.example.com"]
    assert seen["form"]["serial"] == ["1234foobar"]


def test_unreachable_server_raises(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    # Reserve a free port, then close it so nothing is listening.
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    endpoint = ServerEndpoint(base_url=f"http://127.0.0.1:{port}")

    with pytest.raises(EscrowTransportError):
        submit(_record(), endpoint, settings=_settings())
