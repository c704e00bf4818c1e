'''
What the login flow needs from the web application hosting it.
'''
import urllib.parse


class Request(object):
    """The parts of an HTTP request the flow looks at.

    @ivar url: absolute URL of the request, query included.
    @ivar query: query parameters, single values.
    @ivar data: submitted form fields.
    @ivar base: path the application is mounted at, '' for the root.
    """
    def __init__(self, url, query=None, data=None, base=''):
        self.url = url
        self.query = dict(query) if query is not None else self.parse_query(url)
        self.data = dict(data or {})
        self.base = (base or '').rstrip('/')

    @staticmethod
    def parse_query(url):
        # Blank values are kept, the callback marker has none
        query = urllib.parse.urlsplit(url).query
        return dict(urllib.parse.parse_qsl(query, keep_blank_values=True))

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.url)


class Host(object):
    """Capabilities of the hosting application, called by
    L{openauth.flow.AuthFlow.handle}.

    Subclasses implement them on top of their framework. L{issue_redirect}
    and L{render} are the last thing done for a request: nothing else
    should be written to the response afterwards.
    """
    session = None

    def on_request_start(self, request):
        '''
        Called first for every request. Returns True if the user is already
        authenticated, which disables the login path.
        '''
        return False

    def issue_redirect(self, url):
        raise NotImplementedError

    def render(self, html):
        '''
        Sends html as the whole response body.
        '''
        raise NotImplementedError

    def set_session_user(self, identifier, record):
        raise NotImplementedError

    def flash(self, message):
        raise NotImplementedError

    def clear_flash(self):
        pass

    def login_redirect_url(self):
        '''
        Where to send the user after logging in, None to stay.
        '''
        return None
