import unittest
from unittest import mock

from openauth import eaut, resolver
from openauth.errors import UnresolvableIdentifier
from . import support


@support.gentests
class IsEmail(unittest.TestCase):
    data = [
        ('plain', ('alice@example.com', True)),
        ('dots_plus', ('a.b+c@mail.example.co.uk', True)),
        ('url', ('https://alice.example.com/', False)),
        ('url_with_at', ('https://example.com/@alice', False)),
        ('no_tld', ('alice@localhost', False)),
        ('short_tld', ('alice@example.c', False)),
        ('bare_name', ('alice', False)),
        ('xri', ('=alice', False)),
    ]

    def _test(self, value, expected):
        self.assertEqual(resolver.is_email(value), expected)


class Resolve(support.CatchLogs, unittest.TestCase):
    def test_url_unchanged(self):
        r = resolver.IdentifierResolver()
        self.assertEqual(r.resolve('  https://alice.example.com/ '), 'https://alice.example.com/')

    def test_non_url_unchanged(self):
        r = resolver.IdentifierResolver()
        self.assertEqual(r.resolve('alice.example.com'), 'alice.example.com')

    def test_empty(self):
        r = resolver.IdentifierResolver()
        for value in ['', '   ', None]:
            self.assertRaises(UnresolvableIdentifier, r.resolve, value)

    def test_email_without_translation(self):
        r = resolver.IdentifierResolver()
        with self.assertRaises(UnresolvableIdentifier) as cm:
            r.resolve('alice@example.com')
        self.assertEqual(str(cm.exception), 'Can\'t convert from an email to an OpenID URL')

    def test_email(self):
        r = resolver.IdentifierResolver(lambda email: 'https://id.example/' + email.split('@')[0])
        self.assertEqual(r.resolve('alice@example.com'), 'https://id.example/alice')
        self.failUnlessLogged('Resolved alice@example.com to https://id.example/alice', 'INFO')

    def test_email_translation_error(self):
        def fail(email):
            raise eaut.DiscoveryFailure('No EAUT services found')
        r = resolver.IdentifierResolver(fail)
        with self.assertRaises(UnresolvableIdentifier) as cm:
            r.resolve('alice@example.com')
        self.assertIsInstance(cm.exception.__cause__, eaut.DiscoveryFailure)
        self.failUnlessLogged('Resolving alice@example.com failed', 'WARNING')

    def test_email_no_result(self):
        r = resolver.IdentifierResolver(lambda email: None)
        self.assertRaises(UnresolvableIdentifier, r.resolve, 'alice@example.com')

    @mock.patch('urllib.request.urlopen', support.urlopen)
    def test_eaut(self):
        r = resolver.IdentifierResolver(eaut.email_to_id)
        self.assertEqual(r.resolve('alice@template.unittest'), 'http://openid.template.unittest/alice')


if __name__ == '__main__':
    unittest.main()
