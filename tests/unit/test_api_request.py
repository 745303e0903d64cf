"""Tests for request building and response parsing."""
import base64
import json

import pytest

from vimeopy.core.api.config import APIConfig
from vimeopy.core.api.request import (
    RequestBuilder,
    RequestOptions,
    ResponseHandler,
)
from vimeopy.core.api.transport import HttpResponse
from vimeopy.core.exceptions import VimeoRequestError


@pytest.fixture
def builder():
    return RequestBuilder(APIConfig.default())


class TestRequestOptions:
    """Test suite for RequestOptions.coerce."""

    def test_from_path(self):
        options = RequestOptions.coerce('/me/videos?per_page=2')

        assert options.path == '/me/videos?per_page=2'
        assert options.method == 'GET'
        assert options.hostname is None

    def test_from_url(self):
        options = RequestOptions.coerce('http://localhost:8080/videos/1')

        assert options.path == '/videos/1'
        assert options.hostname == 'localhost'
        assert options.port == 8080
        assert options.protocol == 'http'

    def test_from_mapping(self):
        options = RequestOptions.coerce({
            'path': '/me/videos',
            'method': 'POST',
            'params': {'name': 'Clip'},
            'headers': {'X-Test': '1'},
        })

        assert options.method == 'POST'
        assert options.query == {'name': 'Clip'}
        assert options.headers == {'X-Test': '1'}

    def test_passthrough(self):
        options = RequestOptions(path='/me')

        assert RequestOptions.coerce(options) is options

    @pytest.mark.parametrize('value', [None, 42, ['/me']])
    def test_invalid(self, value):
        with pytest.raises(VimeoRequestError, match="You must provide an API path."):
            RequestOptions.coerce(value)


class TestRequestBuilder:
    """Test suite for RequestBuilder."""

    def test_missing_path(self, builder):
        with pytest.raises(VimeoRequestError, match="You must provide an API path."):
            builder.build(RequestOptions(path=None))

    def test_adds_leading_slash(self, builder):
        request = builder.build(RequestOptions(path='me'))

        assert request.url == 'https://api.vimeo.com/me'

    def test_default_headers(self, builder):
        request = builder.build(RequestOptions(path='/me'))

        assert request.headers['Accept'] == 'application/vnd.vimeo.*+json;version=3.4'
        assert request.headers['User-Agent'].startswith('vimeopy/')

    def test_caller_headers_win(self, builder):
        request = builder.build(RequestOptions(path='/me', headers={'Accept': 'application/json'}))

        assert request.headers['Accept'] == 'application/json'

    def test_bearer_auth(self, builder):
        request = builder.build(RequestOptions(path='/me'), access_token='token', client_id='id', client_secret='secret')

        assert request.headers['Authorization'] == 'Bearer token'

    def test_basic_auth(self, builder):
        request = builder.build(RequestOptions(path='/me'), client_id='id', client_secret='secret')

        expected = base64.b64encode(b'id:secret').decode()
        assert request.headers['Authorization'] == f"Basic {expected}"

    def test_no_auth(self, builder):
        request = builder.build(RequestOptions(path='/me'), client_id='id')

        assert 'Authorization' not in request.headers

    def test_json_body(self, builder):
        request = builder.build(RequestOptions(path='/me/videos', method='post', query={'name': 'Clip'}))

        assert request.method == 'POST'
        assert request.headers['Content-Type'] == 'application/json'
        assert json.loads(request.body) == {'name': 'Clip'}
        assert request.headers['Content-Length'] == str(len(request.body.encode('utf-8')))

    def test_content_length_counts_bytes(self, builder):
        request = builder.build(RequestOptions(path='/videos/1', method='PATCH', query={'name': 'Café'}))

        assert int(request.headers['Content-Length']) == len(request.body.encode('utf-8'))
        assert int(request.headers['Content-Length']) > len(request.body)

    def test_form_body(self, builder):
        request = builder.build(RequestOptions(
            path='/oauth/access_token',
            method='POST',
            query={'grant_type': 'authorization_code', 'code': 'abc'},
            headers={'Content-Type': 'application/x-www-form-urlencoded'}
        ))

        assert request.body == 'grant_type=authorization_code&code=abc'

    def test_empty_body(self, builder):
        request = builder.build(RequestOptions(path='/videos/1', method='DELETE'))

        assert request.body is None
        assert request.headers['Content-Length'] == '0'

    def test_get_querystring(self, builder):
        request = builder.build(RequestOptions(path='/me/videos', query={'per_page': 2}))

        assert request.url == 'https://api.vimeo.com/me/videos?per_page=2'
        assert request.body is None

    def test_get_querystring_appends(self, builder):
        request = builder.build(RequestOptions(path='/me/videos?fields=uri', query={'per_page': 2}))

        assert request.url == 'https://api.vimeo.com/me/videos?fields=uri&per_page=2'

    def test_custom_host_and_port(self, builder):
        request = builder.build(RequestOptions(path='/me', hostname='localhost', port=8080, protocol='http'))

        assert request.url == 'http://localhost:8080/me'

    def test_unknown_protocol_falls_back_to_http(self, builder):
        request = builder.build(RequestOptions(path='/me', protocol='ftp', port=80))

        assert request.url == 'http://api.vimeo.com/me'


class TestResponseHandler:
    """Test suite for ResponseHandler."""

    def test_parse_json(self):
        response = ResponseHandler.parse_response(
            HttpResponse(status=200, headers={'X-RateLimit-Remaining': '99'}, body='{"name": "me"}')
        )

        assert response.status_code == 200
        assert response.body == {'name': 'me'}
        assert response.headers['X-RateLimit-Remaining'] == '99'

    def test_empty_body(self):
        assert ResponseHandler.parse_response(HttpResponse(status=204)).body == {}

    def test_invalid_json(self):
        with pytest.raises(VimeoRequestError) as exc_info:
            ResponseHandler.parse_response(HttpResponse(status=200, body='<html>'))

        assert exc_info.value.body == '<html>'
        assert exc_info.value.error_code == 200
