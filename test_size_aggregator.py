"""
Tests for concurrent size collection
"""

import threading
import time
import unittest

from errors import NoSizesRetrieved
from package_info import PackageInfo
from size_aggregator import collect_package_sizes


class FakeFetcher:
    """Returns canned sizes; names missing from the table are unresolvable"""

    def __init__(self, sizes, fail=(), delay=0.0):
        self.sizes = sizes
        self.fail = set(fail)
        self.delay = delay
        self.calls = []
        self.active = 0
        self.peak = 0
        self.lock = threading.Lock()

    def fetch_package_size(self, name):
        with self.lock:
            self.calls.append(name)
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if name in self.fail:
                raise RuntimeError("boom")
            if name not in self.sizes:
                return None
            return PackageInfo.from_size(name, self.sizes[name])
        finally:
            with self.lock:
                self.active -= 1


class TestCollectPackageSizes(unittest.TestCase):
    """Test suite for collect_package_sizes"""

    def test_sorted_and_unresolvable_dropped(self):
        """Test that resolved sizes come back largest first without the unresolvable one"""
        fetcher = FakeFetcher({'P1': 2048, 'P2': 1000000})
        infos = collect_package_sizes(fetcher, {'P1', 'P2', 'P3'}, max_workers=4)

        self.assertEqual([i.name for i in infos], ['P2', 'P1'])
        self.assertEqual(infos[0].pretty_size, "976.56 KB")
        self.assertEqual(infos[1].pretty_size, "2.00 KB")
        self.assertEqual(sorted(fetcher.calls), ['P1', 'P2', 'P3'])

    def test_equal_sizes_ordered_by_name(self):
        """Test that equal sizes are ordered by name"""
        fetcher = FakeFetcher({'zeta': 100, 'alpha': 100, 'mid': 100, 'big': 900})
        infos = collect_package_sizes(fetcher, ['zeta', 'alpha', 'mid', 'big'])
        self.assertEqual([i.name for i in infos], ['big', 'alpha', 'mid', 'zeta'])

    def test_each_name_fetched_once(self):
        """Test that duplicate names are fetched once"""
        fetcher = FakeFetcher({'a': 1})
        infos = collect_package_sizes(fetcher, ['a', 'a', 'a'])
        self.assertEqual(len(infos), 1)
        self.assertEqual(fetcher.calls, ['a'])

    def test_fetcher_exception_is_dropped(self):
        """Test that an exception in one fetch only drops that package"""
        fetcher = FakeFetcher({'a': 1, 'b': 2}, fail={'b'})
        infos = collect_package_sizes(fetcher, ['a', 'b'])
        self.assertEqual([i.name for i in infos], ['a'])

    def test_concurrency_is_bounded(self):
        """Test that no more than max_workers fetches run at once"""
        names = [f"pkg-{i}" for i in range(20)]
        fetcher = FakeFetcher({name: i for i, name in enumerate(names)}, delay=0.01)
        infos = collect_package_sizes(fetcher, names, max_workers=3)
        self.assertEqual(len(infos), 20)
        self.assertLessEqual(fetcher.peak, 3)

    def test_nothing_resolved(self):
        """Test that NoSizesRetrieved is raised when every fetch drops"""
        fetcher = FakeFetcher({})
        with self.assertRaises(NoSizesRetrieved):
            collect_package_sizes(fetcher, ['a', 'b'])

    def test_no_names(self):
        """Test that an empty name list returns an empty result"""
        self.assertEqual(collect_package_sizes(FakeFetcher({}), []), [])

    def test_invalid_worker_count(self):
        """Test that a worker count below 1 is rejected"""
        with self.assertRaises(ValueError):
            collect_package_sizes(FakeFetcher({'a': 1}), ['a'], max_workers=0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
