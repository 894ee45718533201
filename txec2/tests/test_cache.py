# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

from io import BytesIO
from threading import Event, Thread

from twisted.trial.unittest import TestCase

from txec2.cache import CacheEntry, ResponseCache


class CountingDecode(object):
    """
    A decode function which returns a new object for every call.
    """

    def __init__(self):
        self.calls = []

    def __call__(self, body):
        self.calls.append(body)
        return [body]


class ResponseCacheTestCase(TestCase):

    def setUp(self):
        self.cache = ResponseCache()
        self.decode = CountingDecode()

    def test_miss(self):
        value = self.cache.fetch("DescribeKeyPairs", True, b"one", self.decode)
        self.assertEqual([b"one"], value)
        self.assertEqual(
            CacheEntry(b"one", value), self.cache.get("DescribeKeyPairs"))

    def test_hit(self):
        """
        When the body is unchanged the value from the first decode is
        returned again, without decoding.
        """
        first = self.cache.fetch("DescribeKeyPairs", True, b"one", self.decode)
        second = self.cache.fetch(
            "DescribeKeyPairs", True, b"one", self.decode)
        self.assertIs(first, second)
        self.assertEqual(1, len(self.decode.calls))

    def test_changed_body(self):
        first = self.cache.fetch("DescribeKeyPairs", True, b"one", self.decode)
        second = self.cache.fetch(
            "DescribeKeyPairs", True, b"two", self.decode)
        self.assertEqual([b"two"], second)
        self.assertIsNot(first, second)
        self.assertEqual(b"two", self.cache.get("DescribeKeyPairs").body)
        self.assertEqual(2, len(self.decode.calls))

    def test_not_cacheable(self):
        """
        A response which is not cacheable is always decoded and leaves the
        entry for its key alone.
        """
        first = self.cache.fetch("DescribeKeyPairs", True, b"all", self.decode)
        partial = self.cache.fetch(
            "DescribeKeyPairs", False, b"some", self.decode)
        self.assertEqual([b"some"], partial)
        self.assertEqual(
            CacheEntry(b"all", first), self.cache.get("DescribeKeyPairs"))
        again = self.cache.fetch(
            "DescribeKeyPairs", True, b"all", self.decode)
        self.assertIs(first, again)
        self.assertEqual([b"all", b"some"], self.decode.calls)

    def test_not_cacheable_never_stored(self):
        self.cache.fetch("DescribeKeyPairs", False, b"some", self.decode)
        self.cache.fetch("DescribeKeyPairs", False, b"some", self.decode)
        self.assertIdentical(None, self.cache.get("DescribeKeyPairs"))
        self.assertEqual(2, len(self.decode.calls))

    def test_keys_independent(self):
        keypairs = self.cache.fetch(
            "DescribeKeyPairs", True, b"same", self.decode)
        regions = self.cache.fetch(
            "DescribeRegions", True, b"same", self.decode)
        self.assertIsNot(keypairs, regions)
        self.assertEqual(2, len(self.decode.calls))

    def test_file_like_body(self):
        first = self.cache.fetch(
            "DescribeKeyPairs", True, BytesIO(b"one"), self.decode)
        second = self.cache.fetch(
            "DescribeKeyPairs", True, BytesIO(b"one"), self.decode)
        self.assertIs(first, second)
        self.assertEqual([b"one"], self.decode.calls)

    def test_failed_decode(self):
        """
        If decoding fails the previous entry is kept.
        """
        first = self.cache.fetch("DescribeKeyPairs", True, b"one", self.decode)

        def broken(body):
            raise ValueError(body)

        self.assertRaises(
            ValueError, self.cache.fetch, "DescribeKeyPairs", True, b"two",
            broken)
        self.assertEqual(
            CacheEntry(b"one", first), self.cache.get("DescribeKeyPairs"))

    def test_concurrent_fetch(self):
        """
        A caller arriving while the same key is being decoded waits and then
        gets the decoded value.
        """
        decoding = Event()
        release = Event()
        calls = []
        results = []

        def slow(body):
            calls.append(body)
            decoding.set()
            release.wait(5)
            return [body]

        def fetch():
            results.append(
                self.cache.fetch("DescribeKeyPairs", True, b"one", slow))

        first = Thread(target=fetch)
        first.start()
        decoding.wait(5)
        second = Thread(target=fetch)
        second.start()
        release.set()
        first.join(5)
        second.join(5)
        self.assertEqual([b"one"], calls)
        self.assertEqual(2, len(results))
        self.assertIs(results[0], results[1])
