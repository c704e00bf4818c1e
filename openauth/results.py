'''
Values handed back to the host application.

A login form submission ends with a L{Redirect} or a L{FormPost} that the
host must send to the browser as the last thing it does for the request. A
callback ends with one of the L{CallbackResult} subclasses. Requests that
are none of the flow's business get L{PASS}.
'''
from openauth.errors import ErrorKind, MESSAGES


SUCCESS = 'success'
CANCEL = 'cancel'
FAILURE = 'failure'
SETUP_NEEDED = 'setup_needed'


class _Pass(object):
    def __repr__(self):
        return 'PASS'

    def __bool__(self):
        return False

PASS = _Pass()


class Redirect(object):
    def __init__(self, url):
        self.url = url

    def __eq__(self, other):
        return isinstance(other, Redirect) and self.url == other.url

    def __repr__(self):
        return '<Redirect %s>' % self.url


class FormPost(object):
    '''
    An HTML page with a form that submits itself to the provider. It should
    be sent as the whole response body.
    '''
    def __init__(self, html):
        self.html = html

    def __repr__(self):
        return '<FormPost %d bytes>' % len(self.html)


class Verification(object):
    '''
    Outcome of checking a provider response, as reported by the consumer.

    @ivar status: one of SUCCESS, CANCEL, FAILURE, SETUP_NEEDED or
        whatever else the library came up with.
    @ivar attributes: profile attributes under provider names, only for
        SUCCESS.
    '''
    def __init__(self, status, message=None, identifier=None, attributes=None):
        self.status = status
        self.message = message
        self.identifier = identifier
        self.attributes = dict(attributes or {}) if status == SUCCESS else {}

    def __repr__(self):
        return '<Verification %s %r>' % (self.status, self.identifier)


class CallbackResult(object):
    status = None
    kind = None

    def __bool__(self):
        return self.status == SUCCESS

    @property
    def message(self):
        return MESSAGES[self.kind] if self.kind else None


class Success(CallbackResult):
    status = SUCCESS

    def __init__(self, identifier, record):
        self.identifier = identifier
        self.record = record

    def __eq__(self, other):
        return (isinstance(other, Success) and
                (self.identifier, self.record) == (other.identifier, other.record))

    def __repr__(self):
        return '<Success %s %r>' % (self.identifier, self.record)


class Cancelled(CallbackResult):
    status = CANCEL
    kind = ErrorKind.CANCELLED

    def __eq__(self, other):
        return isinstance(other, Cancelled)

    def __repr__(self):
        return '<Cancelled>'


class Failed(CallbackResult):
    status = FAILURE

    def __init__(self, kind, detail=None):
        self.kind = kind
        self.detail = detail

    @property
    def message(self):
        message = MESSAGES[self.kind]
        if self.detail:
            message = '%s: %s' % (message, self.detail)
        return message

    def __eq__(self, other):
        return (isinstance(other, Failed) and
                (self.kind, self.detail) == (other.kind, other.detail))

    def __repr__(self):
        return '<Failed %r>' % self.message
