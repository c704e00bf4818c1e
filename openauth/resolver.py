'''
Turning what the user typed into the login form into an OpenID identifier.
'''
import logging
import re

from openauth.errors import UnresolvableIdentifier


EMAIL_RE = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@([A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?\.)+[A-Za-z]{2,}$"
)


def is_email(value):
    return bool(EMAIL_RE.match(value))


class IdentifierResolver(object):
    """Resolves login input to an OpenID identifier.

    URLs (and anything that is not an email address) are returned as is,
    the OpenID library normalizes and validates them during discovery.
    Email addresses are given to C{email_to_id}, a callable returning the
    identifier for an address. Without it email addresses are rejected.
    """
    def __init__(self, email_to_id=None):
        self.email_to_id = email_to_id

    def resolve(self, value):
        value = (value or '').strip()
        if not value:
            raise UnresolvableIdentifier('Empty OpenID identifier')
        if not is_email(value):
            return value

        if self.email_to_id is None:
            raise UnresolvableIdentifier('Can\'t convert from an email to an OpenID URL')
        try:
            identifier = self.email_to_id(value)
        except Exception as e:
            logging.warning('Resolving %s failed: %s', value, e)
            raise UnresolvableIdentifier('Can\'t convert from an email to an OpenID URL') from e
        if not identifier:
            raise UnresolvableIdentifier('No OpenID URL found for %s' % value)
        logging.info('Resolved %s to %s', value, identifier)
        return identifier
