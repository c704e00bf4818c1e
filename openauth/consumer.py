"""Adapter around the OpenID consumer library.

The protocol work (discovery, associations, signatures, nonces) is done by
C{openid.consumer.consumer.Consumer} from the C{python3-openid} package.
This module narrows it down to what the login flow needs:

    - L{OpenIDConsumer.begin} returns a L{ProviderRequest} or None when the
      identifier has no usable OpenID service;
    - L{ProviderRequest} builds the redirect URL or the auto-submitting form
      and carries the Simple Registration request;
    - L{OpenIDConsumer.complete} returns a L{Verification} with plain
      values instead of the library's response objects.

Library exceptions don't leave this module except as L{ConsumerError}.
"""
import logging

import html5lib
from openid.consumer import consumer
from openid.consumer.discover import DiscoveryFailure
from openid.extensions import sreg

from openauth.errors import ConsumerError
from openauth.results import Verification


XHTML = '{http://www.w3.org/1999/xhtml}'

# Form tag attributes of the auto-submitting page
FORM_ATTRS = {'id': 'openid_message'}


def find_form(markup):
    '''
    Returns the first <form> element of an HTML document or None.
    '''
    root = html5lib.parse(markup)
    return root.find('.//%sform' % XHTML)


class ProviderRequest(object):
    """An authentication request on its way to the provider.

    @ivar request: the library's C{AuthRequest}.
    """
    def __init__(self, request):
        self.request = request

    @property
    def server_url(self):
        return self.request.endpoint.server_url

    def add_attribute_request(self, attribute_request, policy_url=None):
        """Asks the provider for profile attributes with the Simple
        Registration extension.

        Providers and attribute names are free to not support it, so any
        problem is logged and the request goes on without the extension.

        @returns: whether the extension was added.
        """
        if not attribute_request:
            return False
        try:
            sreg_request = sreg.SRegRequest(
                required=attribute_request.mandatory,
                optional=attribute_request.optional,
                policy_url=policy_url,
            )
        except ValueError as e:
            logging.warning('Not requesting attributes %r: %s', attribute_request, e)
            return False
        self.request.addExtension(sreg_request)
        return True

    def should_redirect(self):
        return self.request.shouldSendRedirect()

    def redirect_url(self, realm, return_to):
        try:
            url = self.request.redirectURL(realm, return_to)
        except (ValueError, KeyError) as e:
            raise ConsumerError(str(e)) from e
        if not url:
            raise ConsumerError('No redirect URL for %s' % self.server_url)
        return url

    def html_markup(self, realm, return_to):
        try:
            markup = self.request.htmlMarkup(realm, return_to, form_tag_attrs=FORM_ATTRS)
        except (ValueError, KeyError) as e:
            raise ConsumerError(str(e)) from e
        if not markup or find_form(markup) is None:
            raise ConsumerError('No form markup for %s' % self.server_url)
        return markup


class OpenIDConsumer(object):
    """Runs the library consumer for one request.

    @param session: dict-like per user agent session; the library keeps the
        discovered endpoint there between begin and complete.
    @param store: L{openauth.store.AssociationStore}.
    """
    def __init__(self, session, store):
        self.session = session
        self.store = store
        self.consumer = consumer.Consumer(session, store.backend())

    def begin(self, identifier):
        '''
        Starts the login for identifier. Returns None when the identifier has
        no OpenID service.
        '''
        try:
            request = self.consumer.begin(identifier)
        except DiscoveryFailure as e:
            logging.info('Discovery failed for %s: %s', identifier, e)
            return None
        except (OSError, ValueError) as e:
            raise ConsumerError('Error beginning login for %s: %s' % (identifier, e)) from e
        if request is None:
            return None
        return ProviderRequest(request)

    def complete(self, return_to, params):
        """Checks the provider response in params, the query of the callback
        request without the parameters the application added to it.

        @raises ConsumerError: when the library fails on the response.
        """
        try:
            response = self.consumer.complete(params, return_to)
        except Exception as e:
            raise ConsumerError('Error completing login: %s' % e) from e

        identifier = response.getDisplayIdentifier()
        message = None
        attributes = {}
        if response.status == consumer.SUCCESS:
            sreg_response = sreg.SRegResponse.fromSuccessResponse(response)
            if sreg_response is not None:
                attributes = dict(sreg_response.items())
            logging.info('Verified %s', identifier)
        else:
            if response.status == consumer.FAILURE and response.message is not None:
                message = str(response.message)
            logging.info('Login of %s ended with %s: %s', identifier, response.status, message)
        return Verification(response.status, message, identifier, attributes)
