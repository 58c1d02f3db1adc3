"""
Concurrent size collection for an organization's packages
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List

from loguru import logger

from errors import NoSizesRetrieved
from package_info import PackageInfo, sort_package_infos
from size_fetcher_protocol import PackageSizeFetcher

DEFAULT_WORKERS = 16


def collect_package_sizes(fetcher: PackageSizeFetcher, names: Iterable[str],
                          max_workers: int = DEFAULT_WORKERS) -> List[PackageInfo]:
    """
    Fetch every package size on a bounded thread pool and return them largest first.

    Blocks until every fetch has either produced a PackageInfo or dropped out.

    Raises:
        ValueError: if max_workers is less than 1
        NoSizesRetrieved: if names is non-empty but nothing resolved
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")

    unique_names = sorted(set(names))
    if not unique_names:
        return []

    results: Dict[str, PackageInfo] = {}
    dropped = 0

    with ThreadPoolExecutor(max_workers=min(max_workers, len(unique_names))) as executor:
        futures = {
            executor.submit(fetcher.fetch_package_size, name): name
            for name in unique_names
        }

        for future in as_completed(futures):
            name = futures[future]
            try:
                info = future.result()
            except Exception as e:
                logger.exception("Unexpected error fetching {}: {}", name, e)
                info = None

            if info is None:
                dropped += 1
                continue
            results[info.name] = info

    logger.info("Resolved {} of {} packages ({} skipped)",
                len(results), len(unique_names), dropped)

    if not results:
        raise NoSizesRetrieved(
            f"No package sizes retrieved ({len(unique_names)} packages, none resolvable)"
        )
    return sort_package_infos(results.values())
