"""API endpoint tests."""

import json

import httpx
from structlog.testing import capture_logs

from apps.gateway.services.zoom_webhook import compute_signature


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/healthz")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Tenant Zoom Gateway"
    assert "version" in data


class TestZoomAuth:
    """Test the token exchange endpoint."""

    def test_success(self, client, zoom):
        response = client.post("/tenants/acme/zoom/test-auth")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "accessToken": "tok123",
            "tokenInfo": {"token_type": "bearer", "expires_in": 3600},
        }
        assert zoom.calls == 1

    def test_missing_fields(self, client, zoom):
        response = client.post("/tenants/partial/zoom/test-auth")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["errorKind"] == "configuration"
        assert data["missingFields"] == ["zoom_account_id", "zoom_client_secret"]
        assert zoom.calls == 0

    def test_unknown_tenant(self, client, zoom):
        response = client.post("/tenants/ghost/zoom/test-auth")

        assert response.status_code == 400
        assert response.json()["missingFields"] == [
            "zoom_account_id",
            "zoom_client_id",
            "zoom_client_secret",
        ]
        assert zoom.calls == 0

    def test_upstream_rejection(self, client, zoom):
        zoom.status_code = 400
        zoom.json_body = {"error": "invalid_request", "error_description": "Invalid account_id"}

        response = client.post("/tenants/acme/zoom/test-auth")

        assert response.status_code == 502
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Invalid account_id"
        assert data["errorKind"] == "upstream_auth"
        assert json.loads(data["details"]) == zoom.json_body
        assert "missingFields" not in data

    def test_transport_failure(self, client, zoom):
        zoom.error = httpx.ConnectError("Connection refused")

        response = client.post("/tenants/acme/zoom/test-auth")

        assert response.status_code == 502
        assert response.json() == {
            "success": False,
            "error": "Connection refused",
            "errorKind": "transport",
        }

    def test_resolver_outage(self, client, zoom):
        from apps.gateway.api.dependencies import get_token_exchange
        from apps.gateway.main import app
        from apps.gateway.services.observability import LoggingTokenExchange
        from apps.gateway.services.zoom_token import ZoomTokenClient

        class UnreachableResolver:
            def get_credentials(self, tenant_id):
                raise RuntimeError("could not connect to server")

        app.dependency_overrides[get_token_exchange] = lambda: LoggingTokenExchange(
            ZoomTokenClient(UnreachableResolver(), transport=zoom.transport)
        )

        response = client.post("/tenants/acme/zoom/test-auth")

        assert response.status_code == 503
        data = response.json()
        assert data["errorKind"] == "resolver"
        assert "missingFields" not in data
        assert zoom.calls == 0


class TestZoomStatus:
    """Test the configuration status endpoint."""

    def test_configured(self, client):
        response = client.get("/tenants/acme/zoom/status")

        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings["is_configured"] is True
        assert settings["client_secret_status"] == "configured"
        assert settings["webhook_secret_status"] == "configured"
        assert "secret-1" not in response.text

    def test_partial(self, client):
        settings = client.get("/tenants/partial/zoom/status").json()["settings"]

        assert settings["is_configured"] is False
        assert settings["client_id_status"] == "configured"
        assert settings["missing_fields"] == ["zoom_account_id", "zoom_client_secret"]

    def test_unknown_tenant(self, client):
        response = client.get("/tenants/ghost/zoom/status")

        assert response.status_code == 200
        assert response.json() == {"settings": None}


class TestMeetingArtifacts:
    """Test recording and participant retrieval."""

    def test_recordings(self, client, zoom):
        recordings = {"id": 82259735801, "recording_files": [{"file_type": "MP4"}]}

        def handler(request):
            zoom.requests.append(request)
            if request.url.path == "/oauth/token":
                return httpx.Response(
                    200, json={"access_token": "tok123", "token_type": "bearer", "expires_in": 3600}
                )
            return httpx.Response(200, json=recordings)

        zoom.handler = handler

        response = client.get("/tenants/acme/zoom/meetings/822 5973 5801/recordings")

        assert response.status_code == 200
        assert response.json() == recordings
        api_request = zoom.requests[1]
        assert api_request.url.path == "/v2/meetings/82259735801/recordings"
        assert api_request.headers["Authorization"] == "Bearer tok123"

    def test_participants_uuid_is_encoded(self, client, zoom):
        def handler(request):
            zoom.requests.append(request)
            if request.url.path == "/oauth/token":
                return httpx.Response(
                    200, json={"access_token": "tok123", "token_type": "bearer", "expires_in": 3600}
                )
            return httpx.Response(200, json={"participants": []})

        zoom.handler = handler

        response = client.get("/tenants/acme/zoom/meetings/abc+def==/participants")

        assert response.status_code == 200
        assert zoom.requests[1].url.raw_path == b"/v2/report/meetings/abc%2Bdef%3D%3D/participants"

    def test_invalid_meeting_id(self, client, zoom):
        response = client.get("/tenants/acme/zoom/meetings/not a meeting/recordings")

        assert response.status_code == 400
        assert zoom.calls == 0

    def test_token_failure(self, client, zoom):
        response = client.get("/tenants/partial/zoom/meetings/82259735801/recordings")

        assert response.status_code == 400
        assert response.json()["detail"]["missingFields"] == ["zoom_account_id", "zoom_client_secret"]

    def test_zoom_api_error(self, client, zoom):
        def handler(request):
            zoom.requests.append(request)
            if request.url.path == "/oauth/token":
                return httpx.Response(
                    200, json={"access_token": "tok123", "token_type": "bearer", "expires_in": 3600}
                )
            return httpx.Response(404, json={"code": 3301, "message": "This recording does not exist."})

        zoom.handler = handler

        response = client.get("/tenants/acme/zoom/meetings/82259735801/recordings")

        assert response.status_code == 502
        assert response.json()["detail"] == "This recording does not exist."

    def test_malformed_zoom_response(self, client, zoom):
        def handler(request):
            zoom.requests.append(request)
            if request.url.path == "/oauth/token":
                return httpx.Response(
                    200, json={"access_token": "tok123", "token_type": "bearer", "expires_in": 3600}
                )
            return httpx.Response(200, text="<html>maintenance</html>")

        zoom.handler = handler

        response = client.get("/tenants/acme/zoom/meetings/82259735801/recordings")

        assert response.status_code == 502
        assert response.json()["detail"] == "Malformed response from Zoom"


class TestZoomWebhook:
    """Test webhook signature verification."""

    def _post(self, client, body, secret="whsec-1", timestamp="1700000000", tenant="acme"):
        raw = json.dumps(body).encode()
        return client.post(
            f"/webhooks/zoom/{tenant}",
            content=raw,
            headers={
                "content-type": "application/json",
                "x-zm-request-timestamp": timestamp,
                "x-zm-signature": compute_signature(secret, timestamp, raw),
            },
        )

    def test_url_validation(self, client):
        response = self._post(
            client, {"event": "endpoint.url_validation", "payload": {"plainToken": "abc123"}}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["plainToken"] == "abc123"
        assert len(data["encryptedToken"]) == 64

    def test_event_acknowledged(self, client):
        response = self._post(client, {"event": "recording.completed", "payload": {}})

        assert response.status_code == 200
        assert response.json() == {
            "message": "Webhook received",
            "event": "recording.completed",
            "tenant_id": "acme",
        }

    def test_event_acknowledgement_is_logged(self, client):
        with capture_logs() as logs:
            response = self._post(client, {"event": "meeting.ended", "payload": {}})

        assert response.status_code == 200
        received = [log for log in logs if log["event"] == "Zoom webhook received"]
        assert received[0]["zoom_event"] == "meeting.ended"
        assert received[0]["tenant_id"] == "acme"

    def test_bad_signature(self, client):
        response = self._post(client, {"event": "recording.completed"}, secret="wrong")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_WEBHOOK_SIGNATURE"

    def test_tenant_without_webhook_secret(self, client):
        response = self._post(client, {"event": "recording.completed"}, tenant="partial")

        assert response.status_code == 401

    def test_unknown_tenant(self, client):
        response = self._post(client, {"event": "recording.completed"}, tenant="ghost")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "WEBHOOK_VERIFICATION_ERROR"
