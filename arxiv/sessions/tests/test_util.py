"""Tests for :mod:`arxiv.sessions.util`."""

from unittest import TestCase, mock

from arxiv.sessions import util


class TestFingerprint(TestCase):
    """Fingerprints compare whole session states."""

    def test_deterministic(self):
        """Key order does not matter."""
        self.assertEqual(util.fingerprint({'a': 1, 'b': [1, 2]}),
                         util.fingerprint({'b': [1, 2], 'a': 1}))

    def test_sensitive(self):
        """Any difference in content changes the fingerprint."""
        base = util.fingerprint({'a': 1})
        for other in [{'a': 2}, {'a': '1'}, {'a': 1, 'b': None}, {}]:
            self.assertNotEqual(base, util.fingerprint(other))

    def test_format(self):
        """A SHA-256 hex digest is returned."""
        self.assertEqual(len(util.fingerprint({})), 64)


class TestHelpers(TestCase):
    """Time and identifier helpers."""

    @mock.patch(f'{util.__name__}.time')
    def test_now_ms(self, mock_time):
        """The current time is given in milliseconds."""
        mock_time.time.return_value = 1234.5678
        self.assertEqual(util.now_ms(), 1234567)

    def test_generate_id(self):
        """Generated keys are unique and carry the prefix."""
        first = util.generate_id('sess:')
        self.assertTrue(first.startswith('sess:'))
        self.assertNotEqual(first, util.generate_id('sess:'))

    def test_to_seconds(self):
        """Milliseconds become whole seconds, at least one."""
        self.assertEqual(util.to_seconds(86400000), 86400)
        self.assertEqual(util.to_seconds(1500), 1)
        self.assertEqual(util.to_seconds(10), 1)
