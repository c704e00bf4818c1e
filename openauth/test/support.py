import urllib.request
import urllib.error
import urllib.parse
import io
import os
from logging.handlers import BufferingHandler
import logging

from openauth.host import Host
from openauth.results import Verification, SUCCESS, CANCEL, FAILURE


DATAPATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')


class TestHandler(BufferingHandler):
    def __init__(self, messages):
        BufferingHandler.__init__(self, 0)
        self.messages = messages

    def shouldFlush(self):
        return False

    def emit(self, record):
        self.messages.append(record.__dict__)


class CatchLogs(object):
    def setUp(self):
        self.messages = []
        root_logger = logging.getLogger()
        self.old_log_level = root_logger.getEffectiveLevel()
        root_logger.setLevel(logging.DEBUG)

        self.handler = TestHandler(self.messages)
        formatter = logging.Formatter("%(message)s [%(asctime)s - %(name)s - %(levelname)s]")
        self.handler.setFormatter(formatter)
        root_logger.addHandler(self.handler)

    def tearDown(self):
        root_logger = logging.getLogger()
        root_logger.removeHandler(self.handler)
        root_logger.setLevel(self.old_log_level)

    def logged(self, level=None):
        return [
            r['msg'] % r['args'] if r['args'] else r['msg']
            for r in self.messages
            if level is None or r['levelname'] == level
        ]

    def failUnlessLogged(self, prefix, level=None):
        messages = self.logged(level)
        assert any(m.startswith(prefix) for m in messages), \
               "Expected a log message starting with %r, got %r" % (prefix, messages)


class HTTPResponse:
    def __init__(self, url, status, headers=None, body=None):
        self.url = url
        self.status = status
        self.headers = headers or {}
        self._body = io.BytesIO(body)

    def info(self):
        return self.headers

    def read(self, *args):
        return self._body.read(*args)

    def getheader(self, name):
        return {k.lower(): v for k, v in self.headers.items()}.get(name.lower())


def gentests(cls):
    '''
    TestCase class decorator for data-driven tests.

    Reads a list of (name, args) pairs from cls.data and generates a separate
    test method named 'test_<name>' for each pair. The test method would call
    the method '_test' defined in a class to perform actual testing, passing it
    the args.
    '''
    for name, args in cls.data:
        def g(*args):
            def test_method(self):
                self._test(*args)
            return test_method
        method = g(*args)
        method.__name__ = 'test_' + name
        setattr(cls, method.__name__, method)
    return cls


def urlopen(request, data=None, timeout=None):
    '''
    Stands in for urllib.request.urlopen. Serves files from DATAPATH for
    host 'unittest' and its subdomains. The root path of a subdomain serves
    '<host>.index'. Numeric paths answer with that status, 'header' query
    parameters are added to the response headers.
    '''
    if isinstance(request, str):
        request = urllib.request.Request(request)
    # track the last call arguments
    urlopen.request = request
    urlopen.data = data
    urlopen.timeout = timeout

    url = request.get_full_url()
    parts = urllib.parse.urlparse(url)
    host = parts.netloc.split(':')[0]
    if host != 'unittest' and not host.endswith('.unittest'):
        raise urllib.error.URLError('Wrong host: %s' % parts.netloc)
    path = parts.path.lstrip('/') or host + '.index'
    if path.isdigit():
        status = int(path)
        if 300 <= status < 400:
            raise urllib.error.HTTPError(url, 400, 'Can\'t return 3xx status', {}, io.BytesIO())
        if 400 <= status:
            raise urllib.error.HTTPError(url, status, 'Requested status: %s' % status, {}, io.BytesIO())
        body = b'OK'
    else:
        try:
            with open(os.path.join(DATAPATH, path), 'rb') as f:
                body = f.read()
        except FileNotFoundError:
            raise urllib.error.HTTPError(url, 404, '%s not found' % path, {}, io.BytesIO())
        status = 200

    headers = {
        'Server': 'Urlopen-Mock',
        'Date': 'Mon, 21 Jul 2014 19:52:42 GMT',
        'Content-type': 'text/plain',
        'Content-length': len(body),
    }
    query = urllib.parse.parse_qs(parts.query)
    extra_headers = query.get('header', [])
    headers.update(h.split(': ', 1) for h in extra_headers)
    return HTTPResponse(url, status, headers, body)


class FakeProviderRequest(object):
    '''
    Provider request as returned by a consumer's begin, recording what it is
    asked to do.
    '''
    def __init__(self, identifier, redirect=True, error=None):
        self.identifier = identifier
        self.redirect = redirect
        self.error = error
        self.attribute_requests = []
        self.calls = []

    def add_attribute_request(self, attribute_request, policy_url=None):
        self.attribute_requests.append((attribute_request, policy_url))
        return True

    def should_redirect(self):
        return self.redirect

    def redirect_url(self, realm, return_to):
        self.calls.append(('redirect_url', realm, return_to))
        if self.error:
            raise self.error
        return 'https://idp.example/authorize?' + urllib.parse.urlencode({
            'openid.realm': realm,
            'openid.return_to': return_to,
            'openid.claimed_id': self.identifier,
        })

    def html_markup(self, realm, return_to):
        self.calls.append(('html_markup', realm, return_to))
        if self.error:
            raise self.error
        return ('<html><body onload="document.forms[0].submit();">'
                '<form action="https://idp.example/authorize" method="post">'
                '<input type="hidden" name="openid.realm" value="%s" />'
                '</form></body></html>' % realm)


class FakeProvider(object):
    '''
    Shared state of fake consumers: identifiers that have an OpenID service
    and the response nonces that were already accepted.
    '''
    def __init__(self, identities=(), redirect=True, error=None):
        self.identities = set(identities)
        self.redirect = redirect
        self.error = error
        self.used_nonces = set()
        self.requests = []
        self.completed = []


class FakeConsumer(object):
    '''
    Consumer with the interface of openauth.consumer.OpenIDConsumer. The
    pending login lives in the session, the provider answer is read from
    openid.* parameters the same way the library does.
    '''
    SESSION_KEY = '_fake_openid_pending'

    def __init__(self, session, provider):
        self.session = session
        self.provider = provider

    def begin(self, identifier):
        if identifier not in self.provider.identities:
            return None
        self.session[self.SESSION_KEY] = identifier
        request = FakeProviderRequest(identifier, self.provider.redirect, self.provider.error)
        self.provider.requests.append(request)
        return request

    def complete(self, return_to, params):
        self.provider.completed.append((return_to, dict(params)))
        pending = self.session.pop(self.SESSION_KEY, None)
        mode = params.get('openid.mode')
        if mode == 'cancel':
            return Verification(CANCEL)
        if mode == 'error':
            return Verification(FAILURE, params.get('openid.error'))
        if mode == 'setup_needed':
            return Verification('setup_needed')
        if pending is None:
            return Verification(FAILURE, 'No pending login')
        nonce = params.get('openid.response_nonce')
        if nonce in self.provider.used_nonces:
            return Verification(FAILURE, 'Nonce already used')
        self.provider.used_nonces.add(nonce)
        attributes = {
            k[len('openid.sreg.'):]: v
            for k, v in params.items()
            if k.startswith('openid.sreg.')
        }
        return Verification(SUCCESS, identifier=params.get('openid.claimed_id', pending),
                            attributes=attributes)


class FakeHost(Host):
    def __init__(self, authenticated=False, after_login=None):
        self.session = {}
        self.authenticated = authenticated
        self.after_login = after_login
        self.redirects = []
        self.pages = []
        self.flashes = []
        self.user = None
        self.cleared = 0

    def on_request_start(self, request):
        return self.authenticated

    def issue_redirect(self, url):
        self.redirects.append(url)

    def render(self, html):
        self.pages.append(html)

    def set_session_user(self, identifier, record):
        self.user = (identifier, record)
        self.authenticated = True

    def flash(self, message):
        self.flashes.append(message)

    def clear_flash(self):
        self.cleared += 1

    def login_redirect_url(self):
        return self.after_login
