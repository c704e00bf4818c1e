'''
Configuration of the login flow.

The configuration is built once, when the application starts, and is not
changed afterwards. L{Config.from_dict} also accepts camelCase option names
(C{callbackAction}, C{fieldMapping} and so on) for settings files written
for older deployments.
'''
import enum
import os
import tempfile
import types

from openauth import urinorm
from openauth.errors import ConfigError


DEFAULT_FIELD_MAPPING = {
    'username': 'nickname',
    'name': 'fullname',
    'email': 'email',
}

DEFAULT_MANDATORY_FIELDS = ('username',)
DEFAULT_OPTIONAL_FIELDS = ('name', 'email')

DEFAULT_STORE_PATH = os.path.join(tempfile.gettempdir(), 'openauth')


class IdPolicy(enum.Enum):
    '''
    How the C{id} entry of a logged in user record is produced.
    '''
    NONE = 'none'
    HASH = 'hash'
    UUID = 'uuid'
    LITERAL = 'literal'

    @classmethod
    def parse(cls, value):
        """Returns a (policy, literal value) pair for a setting value.

        False, None and empty values mean no id, so do 0 and '0' as in
        settings files of older deployments. 'hash' and 'uuid' (in any case)
        select those policies, any other value is used as the id itself.
        """
        if isinstance(value, cls):
            if value is cls.LITERAL:
                raise ConfigError('A literal id policy needs the id value itself')
            return value, None
        if value is None or value is False or value in ('', '0'):
            return cls.NONE, None
        if isinstance(value, int) and not isinstance(value, bool) and value == 0:
            return cls.NONE, None
        if isinstance(value, str):
            tag = value.strip().lower()
            if tag in ('none', 'hash', 'uuid'):
                return cls(tag), None
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return cls.LITERAL, value
        raise ConfigError('Invalid id attachment setting: %r' % (value,))


class Config(object):
    """Settings of the login flow.

    @ivar login_url: path (or URL) of the login form action.
    @ivar callback_url: path (or URL) the provider returns to, defaults to
        login_url.
    @ivar callback_parameter: query parameter marking callback requests,
        empty to recognize callbacks by their URL alone.
    @ivar identifier_field: name of the form field with the identifier.
    @ivar field_mapping: application field name -> provider attribute name.
    @ivar mandatory_fields, optional_fields: application fields to request.
    @ivar id_policy, id_value: how to add an id to user records, see
        L{IdPolicy.parse}.
    @ivar store_path: directory for the association store.
    @ivar stateless: don't keep associations at all.
    @ivar resolve_emails: accept email addresses and translate them with EAUT.
    @ivar email_fallback: EAUT mapper for domains without EAUT services.
    @ivar policy_url: privacy policy URL sent with the attribute request.
    @ivar auto_redirect: redirect to the host's post login page on success.
    """
    ALIASES = {
        'loginAction': 'login_url',
        'callbackAction': 'callback_url',
        'callbackParameter': 'callback_parameter',
        'fieldMapping': 'field_mapping',
        'mandatoryFields': 'mandatory_fields',
        'requestMandatoryFields': 'mandatory_fields',
        'optionalFields': 'optional_fields',
        'requestOptionalFields': 'optional_fields',
        'idAttachmentPolicy': 'attach_id',
        'attachId': 'attach_id',
        'associationStorePath': 'store_path',
        'tmp': 'store_path',
        'autoRedirect': 'auto_redirect',
    }

    def __init__(self, login_url, callback_url=None,
                 callback_parameter='openIDCallback', identifier_field='openid',
                 field_mapping=None, mandatory_fields=DEFAULT_MANDATORY_FIELDS,
                 optional_fields=DEFAULT_OPTIONAL_FIELDS, attach_id=None,
                 store_path=DEFAULT_STORE_PATH, stateless=False,
                 resolve_emails=False, email_fallback=None, policy_url=None,
                 auto_redirect=True):
        if not login_url:
            raise ConfigError('login_url is required')
        self.login_url = login_url
        self.callback_url = callback_url or login_url
        self.callback_parameter = callback_parameter or None
        self.identifier_field = identifier_field or 'openid'

        if field_mapping is None:
            field_mapping = DEFAULT_FIELD_MAPPING
        self.field_mapping = types.MappingProxyType(dict(field_mapping))
        self.mandatory_fields = self._fields(mandatory_fields, 'mandatory_fields')
        self.optional_fields = self._fields(optional_fields, 'optional_fields')

        self.id_policy, self.id_value = IdPolicy.parse(attach_id)

        if not stateless and not store_path:
            raise ConfigError('store_path is required unless stateless')
        self.store_path = store_path
        self.stateless = bool(stateless)

        self.resolve_emails = bool(resolve_emails)
        if email_fallback:
            try:
                email_fallback = urinorm.normalize_url(email_fallback)
            except ValueError as e:
                raise ConfigError('Invalid email_fallback: %s' % e)
        self.email_fallback = email_fallback or None
        self.policy_url = policy_url
        self.auto_redirect = bool(auto_redirect)

    @staticmethod
    def _fields(value, name):
        if value is None:
            return ()
        if isinstance(value, str):
            raise ConfigError('%s must be a list of field names, not a string' % name)
        return tuple(value)

    @classmethod
    def from_dict(cls, settings):
        kwargs = {}
        for key, value in settings.items():
            name = cls.ALIASES.get(key, key)
            if name in kwargs:
                raise ConfigError('Option %s given twice' % name)
            kwargs[name] = value
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError('Invalid options: %s' % e)

    def __repr__(self):
        return '<%s login_url=%s callback_url=%s>' % (
            self.__class__.__name__,
            self.login_url,
            self.callback_url,
        )
