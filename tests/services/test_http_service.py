from kbcrawl.services.http_service import HttpService
from kbcrawl.exceptions import HttpFetchError
from unittest.mock import Mock
import pytest
import requests


def test_fetch_success():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = 'hello world'
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    response = http.fetch('http://example.com')
    assert response.status_code == 200
    assert response.text == 'hello world'
    assert response.ok


def test_fetch_sends_user_agent_and_default_timeout():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = 'x'
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client, timeout=10)
    http.fetch('http://example.com')
    mock_http_client.assert_called_once_with('http://example.com', headers={'User-Agent': 'TestAgent'}, timeout=10)


def test_fetch_timeout_is_capped_by_caller():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = 'x'
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client, timeout=10)

    http.fetch('http://example.com', timeout=2.5)
    assert mock_http_client.call_args.kwargs['timeout'] == 2.5

    http.fetch('http://example.com', timeout=60)
    assert mock_http_client.call_args.kwargs['timeout'] == 10


def test_fetch_wraps_timeout_as_retryable():
    mock_http_client = Mock()
    mock_http_client.side_effect = requests.exceptions.Timeout("timed out")
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)

    with pytest.raises(HttpFetchError) as excinfo:
        http.fetch('http://example.com')
    assert "http://example.com" in str(excinfo.value)
    assert excinfo.value.retryable is True


def test_fetch_wraps_connection_error_as_retryable():
    mock_http_client = Mock(side_effect=requests.exceptions.ConnectionError("refused"))
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    with pytest.raises(HttpFetchError) as excinfo:
        http.fetch('http://example.com')
    assert excinfo.value.retryable is True


def test_fetch_wraps_invalid_url_as_permanent():
    mock_http_client = Mock(side_effect=requests.exceptions.InvalidURL("bad url"))
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    with pytest.raises(HttpFetchError) as excinfo:
        http.fetch('http://exa mple.com')
    assert excinfo.value.retryable is False
    assert isinstance(excinfo.value.original, requests.exceptions.InvalidURL)


def test_fetch_content_type_from_headers():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = '<html>test</html>'
    mock_http_client.return_value.headers = {'Content-Type': 'text/html; charset=utf-8'}
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    response = http.fetch('http://example.com')
    assert response.content_type == 'text/html; charset=utf-8'


def test_fetch_non_2xx_is_returned_not_raised():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 404
    mock_http_client.return_value.text = 'missing'
    mock_http_client.return_value.headers = {}
    mock_http_client.return_value.reason = 'Not Found'
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    response = http.fetch('http://example.com/missing')
    assert response.status_code == 404
    assert response.reason == 'Not Found'
    assert not response.ok
