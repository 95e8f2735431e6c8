#!/usr/bin/env python3

# It's the pytest way, pylint: disable=redefined-outer-name

# standards
import gzip
from io import StringIO
import logging
from random import choices, randrange
from string import ascii_letters
from threading import Thread
from time import sleep
import zlib

# 3rd parties
from flask import Flask, jsonify, make_response, request
import pytest
from werkzeug.serving import make_server  # installed transitively by Flask

# boxwire
from boxwire import LOGGER, HttpClient, basic_logging_config
import boxwire.client


basic_logging_config(level='DEBUG')


@pytest.fixture
def client():
    with HttpClient() as client:
        yield client


def flask_app():
    # Yeah, we don't call these directly, but they still need names, pylint: disable=unused-variable
    # And yes, it's a bit long for a function, but it's still readable, pylint: disable=too-many-locals
    app = Flask('boxwire-tests')

    all_methods = ['GET', 'PUT', 'POST', 'DELETE', 'OPTIONS']

    @app.route('/hello')
    def hello():
        return 'hello'

    @app.route('/echo', methods=all_methods)
    def echo():
        return jsonify({
            'method': request.method,
            'args': request.args,
            'files': {
                key: {'filename': storage.filename, 'content': storage.read().decode('UTF-8')}
                for key, storage in request.files.items()
            },
            'form': request.form,
            'data': request.get_data(as_text=True),
            'headers': dict(request.headers.items()),
        })

    @app.route('/status/<int:code>', methods=all_methods)
    def status(code):
        return f'status {code}', code

    num_calls_by_key = {}

    @app.route('/num-calls/<key>')
    def num_calls(key):
        return str(num_calls_by_key.get(key, 0))

    @app.route('/rate-limited/<key>/<int:num_failures>', methods=all_methods)
    def rate_limited(key, num_failures):
        num_calls = num_calls_by_key.get(key, 0)
        num_calls_by_key[key] = num_calls + 1
        if num_calls < num_failures:
            res = make_response(f'slow down {num_calls}', 429)
            if 'retry_after' in request.args:
                res.headers['Retry-After'] = request.args['retry_after']
            return res
        return f'ok after {num_calls} failures, body={request.get_data(as_text=True)!r}'

    @app.route('/gzip')
    def gzipped():
        res = make_response(gzip.compress(b'this was gzipped'))
        res.headers['Content-Encoding'] = 'gzip'
        return res

    @app.route('/deflate')
    def deflated():
        res = make_response(zlib.compress(b'this was deflated'))
        res.headers['Content-Encoding'] = 'deflate'
        return res

    @app.route('/bytes')
    def some_bytes():
        length = int(request.args['length'])
        return b'\x00' * length, 200, {'Content-Type': 'application/octet-stream'}

    @app.route('/latin-1')
    def latin_1():
        return 'Zoé'.encode('ISO-8859-1'), 200, {'Content-Type': 'text/plain; charset=ISO-8859-1'}

    @app.route('/redirect')
    def redirect():
        res = make_response('Bounce', 302)
        res.headers['Location'] = '/hello'
        return res

    @app.route('/slow')
    def slow():
        sleep(2)
        return 'finally'

    return app


@pytest.fixture(scope='session')
def server():
    app = flask_app()
    port = randrange(5000, 50000)
    server = make_server('127.0.0.1', port, app, threaded=True)  # pylint: disable=redefined-outer-name
    app.app_context().push()
    thread = Thread(target=server.serve_forever)
    thread.start()
    try:
        yield f'http://127.0.0.1:{port}'
    finally:
        server.shutdown()
        thread.join()


@pytest.fixture
def mocked_sleep_on_retry(mocker):
    mocker.patch('boxwire.client.sleep')
    return boxwire.client.sleep


@pytest.fixture
def unique_key():
    return ''.join(choices(ascii_letters, k=32))


@pytest.fixture
def captured_logs():
    handler = logging.StreamHandler(StringIO())
    original_handlers = LOGGER.handlers
    LOGGER.handlers = [handler]

    def getvalue():
        value = handler.stream.getvalue()
        handler.stream = StringIO()
        logging.debug('Captured logs: %r', value)
        return value
    yield getvalue

    LOGGER.handlers = original_handlers


def pytest_collection_modifyitems(items):
    for item in items:
        # always applied, whether or not the tests want it
        item.fixturenames.append('mocked_sleep_on_retry')
