#!/usr/bin/env python3

# standards
from datetime import timedelta
from io import BytesIO
import json

# 3rd parties
import pytest

# boxwire
from boxwire import (
    BinaryBody,
    HttpClient,
    HttpError,
    Method,
    Request,
    StandardBody,
    Status,
    Timeout,
    UnsupportedMethod,
)


@pytest.mark.parametrize('method', list(Method))
def test_methods(client, server, method) -> None:
    res = client.execute(Request(f'{server}/echo', method=method))
    assert res.status is Status.SUCCESS
    assert json.loads(res.text)['method'] == method.value


def test_shortcuts(client, server) -> None:
    assert json.loads(client.get(f'{server}/echo').text)['method'] == 'GET'
    assert json.loads(client.post(f'{server}/echo').text)['method'] == 'POST'
    assert json.loads(client.put(f'{server}/echo').text)['method'] == 'PUT'
    assert json.loads(client.delete(f'{server}/echo').text)['method'] == 'DELETE'
    assert client.options(f'{server}/echo').status is Status.SUCCESS


def test_get_sends_no_body(client, server) -> None:
    res = client.get(f'{server}/echo', body=StandardBody(payload='ignored', parameters={'a': 'b'}), params={'x': '1'})
    payload = json.loads(res.text)
    assert payload['data'] == ''
    assert payload['form'] == {}
    assert payload['args'] == {'x': '1'}
    assert 'Content-Type' not in payload['headers']


def test_form_post(client, server) -> None:
    res = client.post(f'{server}/echo', body=StandardBody(parameters={'name': 'My Folder', 'parent': '0'}))
    payload = json.loads(res.text)
    assert payload['form'] == {'name': 'My Folder', 'parent': '0'}
    assert payload['headers']['Content-Type'] == 'application/x-www-form-urlencoded'


def test_payload_post(client, server) -> None:
    res = client.put(
        f'{server}/echo',
        body=StandardBody(payload='{"name": "Zoé"}', content_type='application/json', content_encoding='UTF-8'),
    )
    payload = json.loads(res.text)
    assert payload['data'] == '{"name": "Zoé"}'
    assert payload['headers']['Content-Type'] == 'application/json; charset=UTF-8'


def test_binary_put(client, server) -> None:
    res = client.put(f'{server}/echo', body=BinaryBody(BytesIO(b'raw bytes here')))
    payload = json.loads(res.text)
    assert payload['data'] == 'raw bytes here'
    assert payload['headers']['Content-Length'] == '14'
    assert 'Content-Type' not in payload['headers']


def test_body_level_headers_are_sent_with_a_body(client, server) -> None:
    res = client.put(
        f'{server}/echo',
        body=BinaryBody(BytesIO(b'0123456789')),
        headers=[('Content-Range', 'bytes 0-9/10'), ('Content-MD5', 'eB5eJF1ptWaXm4bijSPyxw==')],
    )
    headers = json.loads(res.text)['headers']
    assert headers['Content-Range'] == 'bytes 0-9/10'
    assert headers['Content-Md5'] == 'eB5eJF1ptWaXm4bijSPyxw=='


def test_body_level_headers_are_dropped_without_a_body(client, server, captured_logs) -> None:
    res = client.get(f'{server}/echo', headers={'Content-MD5': 'eB5eJF1ptWaXm4bijSPyxw=='})
    assert 'Content-Md5' not in json.loads(res.text)['headers']
    assert 'Dropping body headers' in captured_logs()


def test_global_and_request_headers(server) -> None:
    client = HttpClient(headers={'X-Global': 'g'}, user_agent='Nyanya/10.8')
    res = client.execute(Request(f'{server}/echo', headers=[('X-Request', 'r')]))
    headers = json.loads(res.text)['headers']
    assert headers['X-Global'] == 'g'
    assert headers['X-Request'] == 'r'
    assert headers['User-Agent'] == 'Nyanya/10.8'


def test_user_agent_per_call(client, server) -> None:
    res = client.execute(Request(f'{server}/echo'), user_agent='Prapra/12.12')
    assert json.loads(res.text)['headers']['User-Agent'] == 'Prapra/12.12'
    assert client.config.user_agent != 'Prapra/12.12'


@pytest.mark.parametrize(
    'code, expected',
    [
        (200, Status.SUCCESS),
        (201, Status.SUCCESS),
        (202, Status.PENDING),
        (401, Status.UNAUTHORIZED),
        (403, Status.FORBIDDEN),
        (404, Status.ERROR),
        (500, Status.ERROR),
    ],
)
def test_http_outcomes_are_statuses_not_exceptions(client, server, code, expected) -> None:
    res = client.execute(Request(f'{server}/status/{code}'))
    assert res.status_code == code
    assert res.status is expected
    assert res.ok is (expected is Status.SUCCESS)
    assert res.text == f'status {code}'


def test_no_content(client, server) -> None:
    res = client.execute(Request(f'{server}/status/204'))
    assert res.status is Status.SUCCESS
    assert res.text == ''


def test_raise_for_status(client, server) -> None:
    res = client.execute(Request(f'{server}/status/500'))
    with pytest.raises(HttpError) as error:
        res.raise_for_status()
    assert error.value.response is res
    client.execute(Request(f'{server}/status/202')).raise_for_status()


def test_redirects_are_followed_by_default(client, server) -> None:
    res = client.execute(Request(f'{server}/redirect'))
    assert res.status_code == 200
    assert res.text == 'hello'


def test_redirects_not_followed(client, server) -> None:
    res = client.execute(Request(f'{server}/redirect', follow_redirects=False))
    assert res.status_code == 302
    assert res.status is Status.SUCCESS
    assert res.headers['Location'].endswith('/hello')
    assert res.text == 'Bounce'


def test_timeout(client, server) -> None:
    with pytest.raises(Timeout):
        client.execute(Request(f'{server}/slow', timeout=timedelta(milliseconds=200)))


def test_no_timeout_by_default(client, server) -> None:
    assert client.execute(Request(f'{server}/slow')).text == 'finally'


def test_unsupported_method_is_raised_before_sending(server, mocker) -> None:
    client = HttpClient()
    spy = mocker.spy(client.engine, 'request')
    with pytest.raises(UnsupportedMethod):
        client.execute(Request(f'{server}/echo', method='PATCH'))
    spy.assert_not_called()


def test_text_is_decoded_with_response_charset(client, server) -> None:
    res = client.execute(Request(f'{server}/latin-1'))
    assert res.text == 'Zoé'
    assert res.headers['content-type'] == 'text/plain; charset=ISO-8859-1'


def test_result_slot_is_free_for_callers(client, server) -> None:
    res = client.execute(Request(f'{server}/echo'))
    assert res.result is None
    res.result = json.loads(res.text)
    assert res.result['method'] == 'GET'
