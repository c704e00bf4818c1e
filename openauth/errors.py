'''
Exceptions raised while handling a login.
'''
import enum


class ErrorKind(enum.Enum):
    INVALID_IDENTIFIER = 'invalid_identifier'
    NOT_OPENID_CAPABLE = 'not_openid_capable'
    REDIRECT_FAILED = 'redirect_failed'
    CANCELLED = 'cancelled'
    VERIFICATION_FAILED = 'verification_failed'
    UNKNOWN = 'unknown'


MESSAGES = {
    ErrorKind.INVALID_IDENTIFIER: 'Invalid OpenID identifier',
    ErrorKind.NOT_OPENID_CAPABLE: 'Authentication error; not a valid OpenID',
    ErrorKind.REDIRECT_FAILED: 'Could not redirect to server',
    ErrorKind.CANCELLED: 'Verification cancelled',
    ErrorKind.VERIFICATION_FAILED: 'OpenID authentication failed',
    ErrorKind.UNKNOWN: 'Unknown error',
}


class ConfigError(ValueError):
    '''
    Invalid configuration value, raised when the configuration is loaded.
    '''


class UnresolvableIdentifier(ValueError):
    '''
    User input that can't be turned into an OpenID identifier.
    '''


class ConsumerError(Exception):
    '''
    The OpenID library failed to produce a usable answer.
    '''


class AuthError(Exception):
    '''
    A login attempt that can't go on. The message is meant for the end user.
    '''
    def __init__(self, kind, detail=None):
        message = MESSAGES[kind]
        if detail:
            message = '%s: %s' % (message, detail)
        super().__init__(message)
        self.kind = kind
        self.detail = detail

    @property
    def message(self):
        return self.args[0]
