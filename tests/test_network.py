"""Unit tests for the REST client, timeouts and error classification."""

import pytest
from unittest.mock import Mock, patch
from requests.exceptions import ConnectionError, HTTPError, Timeout

from dinar_wallet.shared.network import (
    SINGLE_OBJECT_MEDIA_TYPE,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    QueryOptions,
    TimeoutConfig,
    classify_error,
    create_network_error,
    parse_content_range_total,
)

BASE_URL = "https://project.supabase.co"


def make_response(json_data=None, status_code=200, headers=None, content=b"x"):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.content = content
    response.headers = headers or {}
    response.text = str(json_data)
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def client():
    return NetworkClient(BASE_URL + "/", "anon-key", access_token="user-token")


@pytest.mark.unit
class TestTimeoutConfig:
    def test_default_values(self):
        config = TimeoutConfig()
        assert config.connect_timeout == 5.0
        assert config.read_timeout == 15.0

    def test_request_timeout_tuple(self):
        config = TimeoutConfig(connect_timeout=3.0, read_timeout=10.0)
        assert config.request_timeout == (3.0, 10.0)


@pytest.mark.unit
class TestClassifyError:
    def test_classify_timeout(self):
        assert classify_error(Timeout("timed out")) == NetworkErrorType.TIMEOUT

    def test_classify_connection_error(self):
        error = ConnectionError("Cannot connect to host")
        assert classify_error(error) == NetworkErrorType.CONNECTION_ERROR

    def test_classify_http_error(self):
        response = Mock()
        response.status_code = 500
        assert classify_error(HTTPError(response=response)) == NetworkErrorType.HTTP_ERROR

    def test_classify_unknown_error(self):
        assert classify_error(ValueError("Some error")) == NetworkErrorType.UNKNOWN


@pytest.mark.unit
class TestCreateNetworkError:
    def test_create_timeout_error(self):
        error = Timeout("Connection timed out")
        network_error = create_network_error(error, BASE_URL, "test")
        assert network_error.error_type == NetworkErrorType.TIMEOUT
        assert "timeout" in network_error.message.lower()
        assert "supabase.co" in network_error.message
        assert network_error.original_error is error

    def test_http_error_body_is_parsed(self):
        response = make_response(
            {
                "code": "PGRST116",
                "message": "JSON object requested, multiple (or no) rows returned",
                "details": "The result contains 0 rows",
                "hint": None,
            },
            status_code=406,
        )
        network_error = create_network_error(HTTPError(response=response), BASE_URL)
        assert network_error.status_code == 406
        assert network_error.code == "PGRST116"
        assert network_error.details == "The result contains 0 rows"
        assert network_error.message.startswith("JSON object requested")

    def test_http_error_without_json_body(self):
        response = Mock()
        response.status_code = 502
        response.text = "Bad Gateway"
        response.json.side_effect = ValueError("no json")
        network_error = create_network_error(HTTPError(response=response), BASE_URL, "RPC x")
        assert network_error.code is None
        assert "HTTP error 502" in network_error.message


@pytest.mark.unit
class TestQueryOptions:
    def test_params_include_filters_order_and_limit(self):
        options = QueryOptions(
            columns="id, amount",
            filters={"user_id": ("eq", "u1"), "is_read": ("eq", False)},
            order=("created_at", False),
            limit=50,
        )
        params = options.to_params()
        assert params == {
            "select": "id,amount",
            "user_id": "eq.u1",
            "is_read": "eq.false",
            "order": "created_at.desc",
            "limit": "50",
        }

    def test_default_selects_all_columns(self):
        assert QueryOptions().to_params() == {"select": "*"}


@pytest.mark.unit
class TestNetworkClient:
    def test_base_url_trailing_slash_removed(self, client):
        assert client.rest_url == f"{BASE_URL}/rest/v1"

    def test_headers_use_access_token(self, client):
        headers = client._headers()
        assert headers["apikey"] == "anon-key"
        assert headers["Authorization"] == "Bearer user-token"

    def test_headers_fall_back_to_api_key(self):
        client = NetworkClient(BASE_URL, "anon-key")
        assert client._headers()["Authorization"] == "Bearer anon-key"

    @patch("requests.post")
    def test_rpc_posts_params_without_none(self, mock_post, client):
        mock_post.return_value = make_response([{"success": True}])

        result = client.rpc("process_simple_transfer", {"p_amount": 500, "p_description": None})

        assert result == [{"success": True}]
        args, kwargs = mock_post.call_args
        assert args[0] == f"{BASE_URL}/rest/v1/rpc/process_simple_transfer"
        assert kwargs["json"] == {"p_amount": 500}
        assert kwargs["timeout"] == (5.0, 15.0)
        assert mock_post.call_count == 1

    @patch("requests.post")
    def test_rpc_timeout_is_not_retried(self, mock_post, client):
        mock_post.side_effect = Timeout("slow")

        with pytest.raises(NetworkError) as exc_info:
            client.rpc("process_simple_transfer", {"p_amount": 500})

        assert exc_info.value.error_type == NetworkErrorType.TIMEOUT
        assert mock_post.call_count == 1

    @patch("requests.post")
    def test_rpc_empty_body_returns_none(self, mock_post, client):
        mock_post.return_value = make_response(None, status_code=204, content=b"")
        assert client.rpc("noop") is None

    @patch("requests.get")
    def test_select_single_sets_object_accept_header(self, mock_get, client):
        mock_get.return_value = make_response({"id": "u1"})

        result = client.select(
            "users", QueryOptions(filters={"id": ("eq", "u1")}, single=True)
        )

        assert result == {"id": "u1"}
        kwargs = mock_get.call_args.kwargs
        assert kwargs["headers"]["Accept"] == SINGLE_OBJECT_MEDIA_TYPE
        assert kwargs["params"]["id"] == "eq.u1"

    @patch("requests.get")
    def test_select_http_error_carries_code(self, mock_get, client):
        mock_get.return_value = make_response(
            {"code": "PGRST116", "message": "no rows"}, status_code=406
        )

        with pytest.raises(NetworkError) as exc_info:
            client.select("balances", QueryOptions(single=True))

        assert exc_info.value.code == "PGRST116"
        assert exc_info.value.status_code == 406

    @patch("requests.head")
    def test_count_reads_content_range(self, mock_head, client):
        mock_head.return_value = make_response(headers={"Content-Range": "0-4/5"})

        assert client.count("referrals", {"referrer_id": ("eq", "u1")}) == 5
        headers = mock_head.call_args.kwargs["headers"]
        assert headers["Prefer"] == "count=exact"

    @patch("requests.post")
    def test_insert_requests_representation(self, mock_post, client):
        mock_post.return_value = make_response({"id": "t1"})

        assert client.insert("transactions", {"amount": 10}) == {"id": "t1"}
        headers = mock_post.call_args.kwargs["headers"]
        assert headers["Prefer"] == "return=representation"
        assert headers["Accept"] == SINGLE_OBJECT_MEDIA_TYPE

    @patch("requests.patch")
    def test_update_filters_by_column(self, mock_patch, client):
        mock_patch.return_value = make_response({"id": "c1", "is_frozen": True})

        result = client.update("cards", {"is_frozen": True}, {"id": ("eq", "c1")})

        assert result["is_frozen"] is True
        kwargs = mock_patch.call_args.kwargs
        assert kwargs["params"]["id"] == "eq.c1"
        assert kwargs["json"] == {"is_frozen": True}

    @patch("requests.get")
    def test_connection_error_is_wrapped(self, mock_get, client):
        mock_get.side_effect = ConnectionError("refused")

        with pytest.raises(NetworkError) as exc_info:
            client.select("users")

        assert exc_info.value.error_type == NetworkErrorType.CONNECTION_ERROR


@pytest.mark.unit
class TestParseContentRange:
    def test_total_after_slash(self):
        assert parse_content_range_total("0-9/42") == 42

    def test_empty_range(self):
        assert parse_content_range_total("*/0") == 0

    def test_missing_header(self):
        assert parse_content_range_total(None) == 0

    def test_unknown_total(self):
        assert parse_content_range_total("0-9/*") == 0
