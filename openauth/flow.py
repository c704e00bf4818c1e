"""The OpenID login flow of a Relying Party.

A login takes two requests to the application, with the user's provider in
between:

    1. The login form is submitted with an OpenID identifier (or an email
       address). The identifier is resolved, its provider discovered, and
       the browser is sent to the provider, either with a redirect or with a
       page holding a form that submits itself.

    2. The provider sends the browser back to the callback URL with its
       answer in the query. The answer is verified and, on success, the
       profile attributes it carries are renamed to application field names
       and returned as the user record.

Every request is handled on its own: L{AuthFlow.dispatch} tells from the URL
and the submitted data which of the two steps, if any, applies. What has to
survive between the requests is kept by the OpenID library in the host
session and in the L{association store<openauth.store.AssociationStore>}.

L{AuthFlow.begin_login} and L{AuthFlow.complete_login} only compute results.
L{AuthFlow.handle} runs the whole thing against a L{openauth.host.Host}.
"""
import functools
import hashlib
import logging
import re
import urllib.parse
import uuid

from openauth import attributes, eaut, urinorm
from openauth.config import IdPolicy
from openauth.errors import AuthError, ConsumerError, ErrorKind, UnresolvableIdentifier
from openauth.resolver import IdentifierResolver
from openauth.results import PASS, Redirect, FormPost, Success, Cancelled, Failed, \
     SUCCESS, CANCEL, FAILURE
from openauth.store import AssociationStore


LOGIN = 'login'
CALLBACK = 'callback'

# Added to the callback query by URL routing, never signed by the provider
ROUTING_PARAMS = ('url',)


def realm_for(callback_url, base=''):
    '''
    Returns the realm shown to the user by the provider: the callback URL cut
    down to its scheme, host and application base path.
    '''
    base = (base or '').rstrip('/')
    if base:
        pattern = r'^(https?://[^/?#]+%s)(?=[/?#]|$)' % re.escape(base)
        match = re.match(pattern, callback_url, re.I)
        if match:
            return match.group(1)
    match = re.match(r'^(https?://[^/?#]+)', callback_url, re.I)
    return match.group(1) if match else callback_url


def hash_identifier(identifier):
    return hashlib.sha1(identifier.encode('utf-8')).hexdigest()


def attach_id(record, identifier, policy, value=None):
    if policy is IdPolicy.HASH:
        record['id'] = hash_identifier(identifier)
    elif policy is IdPolicy.UUID:
        record['id'] = str(uuid.uuid4())
    elif policy is IdPolicy.LITERAL:
        record['id'] = value
    return record


class AuthFlow(object):
    """Login flow for one application.

    @ivar config: L{openauth.config.Config}
    @ivar consumer_factory: callable taking the host session and returning
        an object with the interface of L{openauth.consumer.OpenIDConsumer}.
        Defaults to the library backed consumer.
    @ivar resolver: L{openauth.resolver.IdentifierResolver}
    @ivar attribute_request: provider attributes asked for on every login.
    """
    def __init__(self, config, consumer_factory=None, resolver=None, store=None):
        self.config = config
        self.store = store if store is not None else AssociationStore.from_config(config)
        if consumer_factory is None:
            self.store.prepare()
            consumer_factory = self._library_consumer
        self.consumer_factory = consumer_factory

        if resolver is None:
            email_to_id = None
            if config.resolve_emails:
                email_to_id = functools.partial(eaut.email_to_id, fallback=config.email_fallback)
            resolver = IdentifierResolver(email_to_id)
        self.resolver = resolver

        self.attribute_request = attributes.build_request(
            config.mandatory_fields,
            config.optional_fields,
            config.field_mapping,
        )

    def _library_consumer(self, session):
        from openauth.consumer import OpenIDConsumer
        return OpenIDConsumer(session, self.store)

    def _path(self, url, request):
        # Configured absolute URLs include the base path, relative ones don't
        base = request.base if urllib.parse.urlsplit(url).netloc else ''
        return urinorm.normalize_path(url, base)

    def _matches(self, url, request, path):
        # An absolute configured URL also pins the host
        host = urinorm.normalize_host(url)
        if host:
            request_host = urinorm.normalize_host(request.url)
            if request_host and request_host != host:
                return False
        return path == self._path(url, request)

    def dispatch(self, request, authenticated=False):
        '''
        Returns LOGIN, CALLBACK or PASS for a request.
        '''
        path = urinorm.normalize_path(request.url, request.base)
        identifier = request.data.get(self.config.identifier_field)
        if (self._matches(self.config.login_url, request, path) and
            identifier and not authenticated):
            return LOGIN

        parameter = self.config.callback_parameter
        if (self._matches(self.config.callback_url, request, path) and
            (not parameter or parameter in request.query)):
            return CALLBACK

        return PASS

    def callback_url(self, request):
        '''
        Absolute, normalized URL the provider should send the user back to.
        '''
        url = self.config.callback_url
        if not urllib.parse.urlsplit(url).netloc:
            parts = urllib.parse.urlsplit(request.url)
            url = '%s://%s%s/%s' % (parts.scheme, parts.netloc, request.base, url.lstrip('/'))
        parameter = self.config.callback_parameter
        if parameter:
            url += ('&' if '?' in url else '?') + parameter
        return urinorm.normalize_url(url)

    def begin_login(self, identifier, callback_url, session=None, base=''):
        """Starts a login.

        @returns: L{Redirect} or L{FormPost} to send to the browser.

        @raises AuthError: when the login can't be started.
        """
        try:
            identifier = self.resolver.resolve(identifier)
        except UnresolvableIdentifier as e:
            raise AuthError(ErrorKind.INVALID_IDENTIFIER, str(e)) from e

        consumer = self.consumer_factory(session if session is not None else {})
        try:
            request = consumer.begin(identifier)
        except ConsumerError as e:
            raise AuthError(ErrorKind.NOT_OPENID_CAPABLE, str(e)) from e
        if request is None:
            raise AuthError(ErrorKind.NOT_OPENID_CAPABLE)

        request.add_attribute_request(self.attribute_request, self.config.policy_url)

        realm = realm_for(callback_url, base)
        try:
            if request.should_redirect():
                instruction = Redirect(request.redirect_url(realm, callback_url))
            else:
                instruction = FormPost(request.html_markup(realm, callback_url))
        except ConsumerError as e:
            raise AuthError(ErrorKind.REDIRECT_FAILED, str(e)) from e

        logging.info('Sending %s to the provider with %r (realm %s)',
                     identifier, instruction, realm)
        return instruction

    def verification_params(self, query):
        '''
        Returns the callback query without the parameters the provider didn't
        put there: the callback marker and the routing parameters. The
        library rejects a response with arguments missing from return_to.
        '''
        ignore = set(ROUTING_PARAMS)
        if self.config.callback_parameter:
            ignore.add(self.config.callback_parameter)
        return {k: v for k, v in query.items() if k not in ignore}

    def complete_login(self, callback_url, query, session=None):
        """Verifies the provider's answer in the callback query.

        @returns: L{Success}, L{Cancelled} or L{Failed}
        """
        params = self.verification_params(query)
        consumer = self.consumer_factory(session if session is not None else {})
        try:
            verification = consumer.complete(callback_url, params)
        except ConsumerError as e:
            logging.warning('Verification on %s failed: %s', callback_url, e)
            return Failed(ErrorKind.VERIFICATION_FAILED, str(e))

        if verification.status == CANCEL:
            return Cancelled()
        if verification.status == FAILURE:
            return Failed(ErrorKind.VERIFICATION_FAILED, verification.message)
        if verification.status != SUCCESS or not verification.identifier:
            return Failed(ErrorKind.UNKNOWN)

        record = attributes.invert(verification.attributes, self.config.field_mapping)
        attach_id(record, verification.identifier, self.config.id_policy, self.config.id_value)
        return Success(verification.identifier, record)

    def handle(self, request, host):
        """Runs the flow for a request.

        The host gets the redirect, the form page, the logged in user or the
        error message. Returns what was done: a L{Redirect} or L{FormPost}
        for logins, a L{openauth.results.CallbackResult} for callbacks and
        failed logins, PASS for everything else.

        Errors are reported through L{Host.flash<openauth.host.Host.flash>}
        and never raised. Exceptions raised by the host itself (a framework
        stopping the request after a redirect, say) are left alone.
        """
        authenticated = host.on_request_start(request)
        action = self.dispatch(request, authenticated)
        if action == LOGIN:
            return self._login(request, host)
        if action == CALLBACK:
            return self._callback(request, host)
        return PASS

    def _login(self, request, host):
        host.clear_flash()
        identifier = request.data[self.config.identifier_field]
        try:
            instruction = self.begin_login(
                identifier,
                self.callback_url(request),
                self._session(host),
                request.base,
            )
        except AuthError as e:
            logging.info('Login with %r failed: %s', identifier, e)
            return self._fail(host, Failed(e.kind, e.detail))
        except Exception:
            logging.exception('Unexpected error starting login with %r', identifier)
            return self._fail(host, Failed(ErrorKind.UNKNOWN))

        if isinstance(instruction, Redirect):
            host.issue_redirect(instruction.url)
        else:
            host.render(instruction.html)
        return instruction

    def _callback(self, request, host):
        try:
            result = self.complete_login(self.callback_url(request), request.query, self._session(host))
        except Exception:
            logging.exception('Unexpected error completing login on %s', request)
            result = Failed(ErrorKind.UNKNOWN)
        if not result:
            return self._fail(host, result)

        host.set_session_user(result.identifier, result.record)
        if self.config.auto_redirect:
            url = host.login_redirect_url()
            if url:
                host.issue_redirect(url)
        return result

    def _session(self, host):
        if host.session is None:
            # the pending login is lost between the two requests
            logging.warning('%s has no session, logins through it will fail',
                            host.__class__.__name__)
            return {}
        return host.session

    def _fail(self, host, result):
        host.flash(result.message)
        return result
