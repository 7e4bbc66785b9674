"""Tests for :mod:`arxiv.sessions.codec`."""

from unittest import TestCase
from base64 import b64encode
from datetime import datetime

from arxiv.sessions.codec import Base64JSONCodec, Codec, DecodeResult
from arxiv.sessions.exceptions import CorruptPayload


class TestBase64JSONCodec(TestCase):
    """The default codec is base64-encoded JSON."""

    def setUp(self):
        self.codec = Base64JSONCodec()

    def test_encode(self):
        """Data is encoded as base64 JSON."""
        value = self.codec.encode({'foo': 'bar'})
        self.assertEqual(value, b64encode(b'{"foo":"bar"}').decode('ascii'))
        self.assertEqual(self.codec.decode(value), {'foo': 'bar'})

    def test_unicode(self):
        """Non-ASCII content survives the trip."""
        data = {'name': 'Ωmega', '_expire': 1}
        self.assertEqual(self.codec.decode(self.codec.encode(data)), data)

    def test_malformed(self):
        """Malformed values raise :class:`.CorruptPayload`."""
        values = [
            'not base64 at all',
            'é',
            b64encode(b'\xff\xfe').decode('ascii'),     # Not UTF-8.
            b64encode(b'{"foo": ').decode('ascii'),     # Not JSON.
            b64encode(b'"foo"').decode('ascii'),        # Not an object.
        ]
        for value in values:
            with self.assertRaises(CorruptPayload):
                self.codec.decode(value)

    def test_deeply_nested(self):
        """Nesting too deep to parse is malformed, not an error."""
        depth = 100000
        for raw in [b'[' * depth,
                    b'{"a":' * depth + b'1' + b'}' * depth]:
            value = b64encode(raw).decode('ascii')
            with self.assertRaises(CorruptPayload):
                self.codec.decode(value)
            self.assertEqual(self.codec.load(value), DecodeResult(None, True))

    def test_encode_non_json_values(self):
        """Values JSON cannot represent are encoded as strings."""
        when = datetime(2020, 1, 2, 3, 4, 5)
        value = self.codec.encode({'when': when})
        self.assertEqual(self.codec.decode(value), {'when': str(when)})

    def test_load(self):
        """Loading classifies malformed input as corrupt."""
        self.assertEqual(self.codec.load('@@@'), DecodeResult(None, True))
        result = self.codec.load(self.codec.encode({'a': 1}))
        self.assertEqual(result.data, {'a': 1})
        self.assertFalse(result.corrupt)


class TestCodecContract(TestCase):
    """Only :class:`.CorruptPayload` counts as corrupt input."""

    def test_other_errors_propagate(self):
        """Any other decode error is raised from :meth:`.Codec.load`."""
        class BrokenCodec(Codec):
            def encode(self, data):
                return ''

            def decode(self, value):
                raise KeyError('unexpected')

        with self.assertRaises(KeyError):
            BrokenCodec().load('foo')
