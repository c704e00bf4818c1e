'''
HTTP GET for discovery documents with default headers, a timeout and a cap on
the size of the body read.
'''
import urllib.request
import urllib.error
import urllib.parse
import sys

import openauth


USER_AGENT = 'openauth/%s (%s) Python-urllib/%s' % (
    openauth.__version__,
    sys.platform,
    urllib.request.__version__,
)

DEFAULT_TIMEOUT = 10

# Discovery documents are small, anything larger is truncated
MAX_RESPONSE = 1024 * 1024


def fetch(url, headers=None, timeout=DEFAULT_TIMEOUT):
    '''
    Opens url and returns the response object. Only http and https URLs
    are accepted, anything else raises URLError without touching the network.
    '''
    if urllib.parse.urlparse(url).scheme not in ('http', 'https'):
        raise urllib.error.URLError('Bad URL scheme: %r' % url)

    headers = dict(headers or {})
    headers.setdefault('User-Agent', USER_AGENT)

    request = urllib.request.Request(url, headers=headers)
    return urllib.request.urlopen(request, timeout=timeout)


def read(response, limit=MAX_RESPONSE):
    return response.read(limit)
