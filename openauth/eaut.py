'''
Email Address to URL Translation (EAUT).

Turns an email address into an OpenID identifier by looking at the Yadis
document of the address' domain. Two kinds of EAUT services are understood:

    - template: the service URI contains ``{username}`` which is replaced
      with the local part of the address;
    - mapping: the service URI is a mapper endpoint which gets the whole
      address as the ``email`` query parameter and redirects to the
      identifier.

Services are tried in the priority order of the XRDS document. When the
domain doesn't advertise anything a fallback mapper can be supplied.
'''
import logging
import urllib.parse

from openauth import fetchers, xrds, yadis


EAUT_TEMPLATE = 'http://specs.eaut.org/1.0/template'
EAUT_MAPPING = 'http://specs.eaut.org/1.0/mapping'

SERVICE_TYPES = [EAUT_TEMPLATE, EAUT_MAPPING]


class DiscoveryFailure(Exception):
    pass


def split_email(email):
    user, sep, domain = email.strip().rpartition('@')
    if not sep or not user or not domain:
        raise DiscoveryFailure('Not an email address: %s' % email)
    return user, domain.lower()


def apply_template(uri, user):
    return uri.replace('{username}', urllib.parse.quote(user, safe=''))


def apply_mapping(uri, email):
    separator = '&' if urllib.parse.urlsplit(uri).query else '?'
    return uri + separator + urllib.parse.urlencode({'email': email})


def discover_services(domain, timeout=fetchers.DEFAULT_TIMEOUT):
    '''
    Returns EAUT service elements advertised by the domain, best first.
    Network and parsing problems are logged and yield an empty list.
    '''
    url = 'http://%s/' % domain
    try:
        final_url, data = yadis.fetch_data(url, timeout)
        return xrds.get_elements(data, SERVICE_TYPES)
    except OSError as e:
        logging.warning('EAUT discovery on %s failed: %s', url, e)
    except xrds.XRDSError as e:
        logging.warning('No EAUT document at %s: %s', url, e)
    return []


def translate(element, user, email):
    types = xrds.getTypeURIs(element)
    uri = xrds.getURI(element)
    if EAUT_TEMPLATE in types:
        return apply_template(uri, user)
    return apply_mapping(uri, email)


def email_to_id(email, fallback=None, timeout=fetchers.DEFAULT_TIMEOUT):
    '''
    Returns the OpenID identifier for an email address.

    @param fallback: URL of an EAUT mapper used when the domain has no
        EAUT services of its own.

    @raises DiscoveryFailure: when the address can't be translated.
    '''
    user, domain = split_email(email)
    services = discover_services(domain, timeout)
    if services:
        return translate(services[0], user, email)
    if fallback:
        logging.info('Using fallback EAUT mapper for %s', domain)
        return apply_mapping(fallback, email)
    raise DiscoveryFailure('No EAUT services found for %s' % domain)
