"""Tests for the base Client and the status document fetchers."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from deposit_services.clients import (
    APIError,
    AuthenticationError,
    Client,
    ConnectionError,
    LocalDocumentFetcher,
    NotFoundError,
    RateLimitError,
    StatusDocumentClient,
)
from schemas.repository import ProtocolBinding

BASE_URL = "https://repository.example.edu"


class ConcreteClient(Client):
    """Concrete implementation of Client for testing."""

    def fetch(self, *args, **kwargs):
        return self.get("/statement")


def _error_response(status_code: int) -> MagicMock:
    response = MagicMock()
    response.is_success = False
    response.status_code = status_code
    response.url = f"{BASE_URL}/statement"
    return response


class TestClientConfiguration:
    """Tests for Client configuration."""

    def test_requires_base_url(self):
        """Client raises ValueError if base_url is missing."""
        with pytest.raises(ValueError, match="base_url"):
            ConcreteClient({})

    def test_defaults(self):
        """Client falls back to default timeout, retries and headers."""
        client = ConcreteClient({"base_url": BASE_URL})

        assert client.base_url == BASE_URL
        assert client.timeout == 30
        assert client.retry_attempts == 3
        assert client.retry_delay == 1
        assert client.headers == {}
        assert client.auth is None

    def test_custom_settings(self):
        client = ConcreteClient({
            "base_url": BASE_URL,
            "timeout": 60,
            "retry_attempts": 5,
            "retry_delay": 0.5,
            "headers": {"User-Agent": "pass-deposit/1.0"},
        })

        assert client.timeout == 60
        assert client.retry_attempts == 5
        assert client.retry_delay == 0.5
        assert client.headers == {"User-Agent": "pass-deposit/1.0"}

    def test_basic_auth_from_credentials(self):
        """Username and password in config become HTTP basic auth."""
        client = ConcreteClient({
            "base_url": BASE_URL,
            "username": "depositor",
            "password": "secret",
        })

        assert isinstance(client.auth, httpx.BasicAuth)


class TestClientLifecycle:
    """Tests for Client lifecycle management."""

    def test_lazy_client_initialization(self):
        """httpx.Client is not created until accessed."""
        client = ConcreteClient({"base_url": BASE_URL})

        assert client._client is None

        _ = client.client

        assert isinstance(client._client, httpx.Client)
        client.close()

    def test_context_manager_closes_client(self):
        with ConcreteClient({"base_url": BASE_URL}) as client:
            _ = client.client

        assert client._client is None

    def test_close_when_not_initialized(self):
        """Calling close when client not initialized is safe."""
        client = ConcreteClient({"base_url": BASE_URL})
        client.close()

        assert client._client is None


class TestClientErrorHandling:
    """Tests for mapping HTTP error responses to exceptions."""

    @pytest.mark.parametrize(
        "status_code,error_class",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (429, RateLimitError),
            (500, APIError),
            (502, APIError),
        ],
    )
    def test_error_responses(self, status_code, error_class):
        client = ConcreteClient({"base_url": BASE_URL})

        with pytest.raises(error_class) as exc_info:
            client._handle_response(_error_response(status_code))

        assert exc_info.value.status_code == status_code

    def test_success_returns_response(self):
        """Successful response is returned as-is."""
        client = ConcreteClient({"base_url": BASE_URL})
        response = MagicMock()
        response.is_success = True

        assert client._handle_response(response) is response


class TestClientRetryLogic:
    """Tests for Client retry behavior."""

    @patch("deposit_services.clients.client.sleep")
    def test_retries_on_connection_error(self, mock_sleep):
        """Client retries on connection errors, sleeping between attempts."""
        client = ConcreteClient({
            "base_url": BASE_URL,
            "retry_attempts": 3,
            "retry_delay": 0.1,
        })
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.ConnectError("Connection refused")
        client._client = mock_http_client

        with pytest.raises(ConnectionError) as exc_info:
            client.get("/statement")

        assert "Connection failed after 3 attempts" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert mock_http_client.request.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("deposit_services.clients.client.sleep")
    def test_retries_on_timeout(self, mock_sleep):
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 2})
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.TimeoutException("Request timed out")
        client._client = mock_http_client

        with pytest.raises(ConnectionError):
            client.get("/statement")

        assert mock_http_client.request.call_count == 2

    @patch("deposit_services.clients.client.sleep")
    def test_retries_are_logged_with_server(self, mock_sleep, caplog):
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 2})
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.ConnectError("Connection refused")
        client._client = mock_http_client

        with pytest.raises(ConnectionError):
            client.get("/statement")

        assert f"ConnectError reaching {BASE_URL} (attempt 1/2)" in caplog.text
        assert f"ConnectError reaching {BASE_URL} (attempt 2/2)" in caplog.text
        assert mock_sleep.call_count == 1

    @patch("deposit_services.clients.client.sleep")
    def test_succeeds_after_retry(self, mock_sleep):
        """Client succeeds if a later attempt works."""
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 3})
        success_response = MagicMock()
        success_response.is_success = True
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = [
            httpx.ConnectError("Connection refused"),
            success_response,
        ]
        client._client = mock_http_client

        assert client.get("/statement") is success_response
        assert mock_http_client.request.call_count == 2

    def test_no_retry_on_api_error(self):
        """Error responses are not transient and are not retried."""
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 3})
        mock_http_client = MagicMock()
        mock_http_client.request.return_value = _error_response(400)
        client._client = mock_http_client

        with pytest.raises(APIError):
            client.get("/statement")

        assert mock_http_client.request.call_count == 1


class TestClientAbstractMethods:
    """Tests for Client abstract methods."""

    def test_fetch_must_be_implemented(self):
        """Subclasses must implement fetch method."""

        class IncompleteClient(Client):
            pass

        with pytest.raises(TypeError, match="fetch"):
            IncompleteClient({"base_url": BASE_URL})


class TestStatusDocumentClient:
    """Tests for StatusDocumentClient."""

    def test_fetch_returns_document_bytes(self, atom_statement):
        document = atom_statement("http://dspace.org/state/archived")
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, content=document)

        client = StatusDocumentClient({"base_url": BASE_URL})
        client._client = httpx.Client(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        )

        with client:
            content = client.fetch("/swordv2/statement/1234.atom")

        assert content == document
        assert requests[0].url.path == "/swordv2/statement/1234.atom"
        assert "application/atom+xml" in requests[0].headers["Accept"]

    def test_fetch_missing_document(self):
        client = StatusDocumentClient({"base_url": BASE_URL})
        client._client = httpx.Client(
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(404)),
        )

        with client, pytest.raises(NotFoundError):
            client.fetch("/swordv2/statement/missing.atom")

    def test_from_protocol_binding(self):
        binding = ProtocolBinding.model_validate({
            "protocol": "SWORDv2",
            "username": "depositor",
            "password": "secret",
            "server-fqdn": "jscholarship.library.jhu.edu",
            "server-port": "8443",
            "user-agent": "pass-deposit/1.0",
        })

        client = StatusDocumentClient.from_protocol_binding(binding, retry_attempts=1)

        assert client.base_url == "https://jscholarship.library.jhu.edu:8443"
        assert client.headers == {"User-Agent": "pass-deposit/1.0"}
        assert client.retry_attempts == 1
        assert client.auth is not None

    def test_from_protocol_binding_requires_server(self):
        binding = ProtocolBinding(protocol="SWORDv2")

        with pytest.raises(ValueError, match="server-fqdn"):
            StatusDocumentClient.from_protocol_binding(binding)


class TestLocalDocumentFetcher:
    """Tests for LocalDocumentFetcher."""

    def test_plain_path(self, tmp_path):
        path = tmp_path / "statement.xml"
        path.write_bytes(b"<feed/>")

        assert LocalDocumentFetcher().fetch(str(path)) == b"<feed/>"

    def test_file_uri(self, tmp_path):
        path = tmp_path / "statement with space.xml"
        path.write_bytes(b"<feed/>")

        assert LocalDocumentFetcher().fetch(path.as_uri()) == b"<feed/>"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalDocumentFetcher().fetch(str(tmp_path / "missing.xml"))
