'''
Yadis discovery: locating and fetching the XRDS document advertised by a URL.
'''
import email.message

import html5lib

from openauth import fetchers


HEADER = 'x-xrds-location'
ACCEPT = 'application/xrds+xml'

XHTML = '{http://www.w3.org/1999/xhtml}'


def http_equiv(content):
    '''
    Returns the content of the X-XRDS-Location <meta http-equiv> element in
    the <head> of an HTML document or None.
    '''
    root = html5lib.parse(content)
    for meta in root.findall('%shead/%smeta' % (XHTML, XHTML)):
        if meta.get('http-equiv', '').lower() == HEADER:
            return meta.get('content')


def charset(content_type, default='utf-8'):
    header = email.message.Message()
    header['content-type'] = content_type
    return header.get_param('charset') or default


def _yadis_location(response, body):
    '''
    Checks if the HTTP response refers to a Yadis document in its
    headers or in the HTML meta.

    Returns the location found or None.
    '''
    location = response.getheader(HEADER)
    if location:
        return location
    content_type = response.getheader('content-type') or ''
    if content_type.split(';')[0].strip().lower() == ACCEPT:
        return None
    try:
        content = body.decode(charset(content_type), 'replace')
    except LookupError:
        content = body.decode('utf-8', 'replace')
    return http_equiv(content)


def fetch_data(uri, timeout=fetchers.DEFAULT_TIMEOUT):
    '''
    Fetches unparsed text of the Yadis document.
    Returns the URL after redirects and the text
    '''
    response = fetchers.fetch(uri, headers={'Accept': ACCEPT}, timeout=timeout)
    text = fetchers.read(response)
    location = _yadis_location(response, text)
    if location:
        text = fetchers.read(fetchers.fetch(location, timeout=timeout))
    return response.url, text
