'''
Durable state kept between the two requests of a login: associations with
providers and the nonces already seen in their responses.

The data itself is written by the OpenID library's file store. This module
owns the directory: it is checked once at startup and shared by all
requests. The file store writes through temporary files renamed into place,
so concurrent logins don't step on each other.
'''
import logging
import os

from openauth.errors import ConfigError


class AssociationStore(object):
    '''
    @ivar path: absolute path of the store directory or None for stateless
        operation.
    '''
    def __init__(self, path):
        self.path = os.path.abspath(path) if path else None
        self._backend = None

    @classmethod
    def from_config(cls, config):
        return cls(None if config.stateless else config.store_path)

    @property
    def stateless(self):
        return self.path is None

    def prepare(self):
        """Creates the directory if needed.

        @raises ConfigError: when the path can't be used.
        """
        if self.stateless:
            return
        try:
            os.makedirs(self.path, mode=0o700, exist_ok=True)
        except OSError as e:
            raise ConfigError('Can\'t create association store %s: %s' % (self.path, e))
        if not os.access(self.path, os.R_OK | os.W_OK | os.X_OK):
            raise ConfigError('Association store %s is not writable' % self.path)
        logging.info('Using association store in %s', self.path)

    def backend(self):
        '''
        Returns the library store object or None when stateless.
        '''
        if self.stateless:
            return None
        if self._backend is None:
            from openid.store.filestore import FileOpenIDStore
            self.prepare()
            self._backend = FileOpenIDStore(self.path)
        return self._backend

    def cleanup(self):
        '''
        Removes expired nonces and associations. Returns the number of
        removed entries of both kinds.
        '''
        backend = self.backend()
        if backend is None:
            return 0, 0
        # the library's cleanup() doesn't report counts, its parts do
        nonces = backend.cleanupNonces()
        associations = backend.cleanupAssociations()
        logging.info('Removed %s nonces and %s associations from %s',
                     nonces, associations, self.path)
        return nonces, associations
