"""
Unit Tests for rate limit keys and client address resolution
"""
from starlette.requests import Request

from seminar.api.v1.endpoints.registration import client_ip
from seminar.core.rate_limiter import get_client_identifier


def make_request(headers=None, client=("203.0.113.7", 50000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/admin/login",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestClientIdentifier:

    def test_keys_on_socket_peer(self):
        assert get_client_identifier(make_request()) == "ip:203.0.113.7"

    def test_ignores_client_supplied_forwarded_for(self):
        first = make_request({"X-Forwarded-For": "10.0.0.1"})
        second = make_request({"X-Forwarded-For": "10.0.0.2, 10.0.0.3"})

        assert get_client_identifier(first) == get_client_identifier(second) == "ip:203.0.113.7"

    def test_authenticated_admin_takes_precedence(self):
        request = make_request()
        request.state.admin_id = "abc"

        assert get_client_identifier(request) == "admin:abc"


class TestClientIp:

    def test_stored_address_is_socket_peer(self):
        assert client_ip(make_request({"X-Forwarded-For": "198.51.100.9"})) == "203.0.113.7"

    def test_missing_client(self):
        assert client_ip(make_request(client=None)) is None
