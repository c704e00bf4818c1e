'''
URL normalization: configured and generated absolute URLs, and the looser
path normalization used to decide which part of the flow a request belongs to.
'''
import re
import urllib.parse


SLASHES_RE = re.compile(r'/{2,}')
DEFAULT_PORTS = {'http': 80, 'https': 443}


def remove_dot_segments(path):
    '''
    Resolves '.' and '..' segments of an absolute path. '..' never climbs
    above the root.
    '''
    segments = path.split('/')[1:]
    result = []
    for segment in segments:
        if segment == '..':
            if result:
                result.pop()
        elif segment != '.':
            result.append(segment)
    if segments and segments[-1] in ('.', '..'):
        result.append('')
    return '/' + '/'.join(result)


def _host(parts, scheme):
    host = parts.hostname
    if ':' in host:
        host = '[%s]' % host
    port = parts.port
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = '%s:%s' % (host, port)
    return host


def normalize_host(url):
    '''
    Returns the lowercase host of an absolute URL, with the port only when it
    isn't the scheme's default. '' for a relative URL.
    '''
    parts = urllib.parse.urlsplit(url or '')
    if not parts.hostname:
        return ''
    try:
        return _host(parts, parts.scheme.lower())
    except ValueError:
        # bad port, compared as written
        return parts.netloc.lower()


def normalize_url(url):
    '''
    Normalizes an absolute http or https URL: lowercase scheme and host, no
    default port, dot segments resolved, '/' for an empty path. Query and
    fragment are kept as they are.

    Raises ValueError for anything else.
    '''
    parts = urllib.parse.urlsplit(url.strip())
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parts.hostname:
        raise ValueError('Not an absolute HTTP or HTTPS URL: %s' % url)
    if any(c.isspace() or not c.isprintable() for c in url.strip()):
        raise ValueError('Illegal characters in URL: %r' % url)

    host = _host(parts, scheme)
    if parts.username is not None:
        host = '%s@%s' % (parts.netloc.rpartition('@')[0], host)

    path = remove_dot_segments(parts.path or '/')
    return urllib.parse.urlunsplit((scheme, host, path, parts.query, parts.fragment))


def normalize_path(url, base=''):
    '''
    Reduces a URL or a path to an application path for comparisons: scheme,
    host, query and fragment are dropped, so are the application base path,
    repeated slashes, dot segments and the trailing slash.

        normalize_path('http://example.com/app/users/login/?a=1', '/app')
        == '/users/login'
    '''
    path = urllib.parse.urlsplit(url or '').path
    path = urllib.parse.unquote(path)
    path = SLASHES_RE.sub('/', '/' + path)
    base = SLASHES_RE.sub('/', '/' + (base or '')).rstrip('/')
    if base and (path == base or path.startswith(base + '/')):
        path = path[len(base):]
    path = remove_dot_segments(path or '/')
    return path.rstrip('/') or '/'
