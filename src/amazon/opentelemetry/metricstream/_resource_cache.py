# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
import json
import os
from logging import Logger, getLogger
from typing import Dict, List, Optional

from amazon.opentelemetry.metricstream._tagging import ResourceDiscovery, TaggedResource
from amazon.opentelemetry.metricstream.exceptions import NoResourcesFoundError, ResourceFetchError

_logger: Logger = getLogger(__name__)

DEFAULT_CACHE_TTL = datetime.timedelta(hours=1)
CACHE_FILE_PREFIX = "cache"


class _Clock:
    def now(self) -> datetime.datetime:
        return datetime.datetime.now()

    # pylint: disable=no-self-use
    def from_timestamp(self, timestamp: float) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(timestamp)


class FileCacheStorage:
    """
    Stores one file per namespace in a directory, e.g. <directory>/cache-AWS-EC2.

    Files are overwritten as a whole and are not locked: concurrent invocations sharing the
    directory may refresh the same namespace, in which case the last writer wins.
    """

    def __init__(self, directory: str, clock: Optional[_Clock] = None):
        self._directory = directory
        self._clock = clock or _Clock()

    def path(self, namespace: str) -> str:
        return os.path.join(self._directory, f"{CACHE_FILE_PREFIX}-{namespace.replace('/', '-')}")

    def exists(self, namespace: str) -> bool:
        return os.path.isfile(self.path(namespace))

    def modified_at(self, namespace: str) -> datetime.datetime:
        return self._clock.from_timestamp(os.path.getmtime(self.path(namespace)))

    def read(self, namespace: str) -> bytes:
        with open(self.path(namespace), "rb") as cache_file:
            return cache_file.read()

    def write(self, namespace: str, data: bytes) -> None:
        with open(self.path(namespace), "wb") as cache_file:
            cache_file.write(data)


class _CacheEntry:
    def __init__(self, resources: List[TaggedResource], fetched_at: datetime.datetime):
        self.resources = resources
        self.fetched_at = fetched_at


class ResourceTagCache:
    """
    Namespace-keyed cache of tagged resources with a fixed TTL.

    Entries are kept in memory for the lifetime of the cache and persisted to storage so that
    later invocations can reuse them. Expiry is checked lazily on access. Without storage,
    caching is disabled and every lookup fetches from resource discovery.
    """

    def __init__(
        self,
        discovery: ResourceDiscovery,
        region: Optional[str],
        storage: Optional[FileCacheStorage] = None,
        ttl: datetime.timedelta = DEFAULT_CACHE_TTL,
        clock: Optional[_Clock] = None,
    ):
        self._discovery = discovery
        self._region = region
        self._storage = storage
        self._ttl = ttl
        self._clock = clock or _Clock()
        self._entries: Dict[str, _CacheEntry] = {}

    def is_stale(self, fetched_at: datetime.datetime) -> bool:
        return self._clock.now() - fetched_at >= self._ttl

    def get(self, namespace: str) -> List[TaggedResource]:
        """
        Return the tagged resources of a namespace, refreshing them when missing or stale.

        Raises ResourceFetchError when resource discovery fails.
        """
        if self._storage is None:
            return self._fetch(namespace)

        entry = self._entries.get(namespace)
        if entry is not None and not self.is_stale(entry.fetched_at):
            return entry.resources

        entry = self._load(namespace)
        if entry is None:
            _logger.debug("Refreshing resource cache for namespace %s", namespace)
            fetched_at = self._clock.now()
            resources = self._fetch(namespace)
            self._persist(namespace, resources)
            entry = _CacheEntry(resources, fetched_at)

        self._entries[namespace] = entry
        return entry.resources

    def _fetch(self, namespace: str) -> List[TaggedResource]:
        try:
            return self._discovery.get_resources(namespace, self._region)
        except NoResourcesFoundError as exc:
            _logger.debug("No resources found for namespace %s: %s", namespace, exc)
            return []
        except Exception as exc:  # pylint: disable=broad-except
            raise ResourceFetchError(namespace, exc) from exc

    def _load(self, namespace: str) -> Optional[_CacheEntry]:
        try:
            if not self._storage.exists(namespace):
                return None
            modified_at = self._storage.modified_at(namespace)
            if self.is_stale(modified_at):
                _logger.debug("Resource cache for namespace %s is stale", namespace)
                return None
            payload = json.loads(self._storage.read(namespace))
            resources = [TaggedResource.from_dict(item) for item in payload]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            _logger.warning("Ignoring unreadable resource cache for namespace %s: %s", namespace, exc)
            return None

        _logger.debug("Loaded %s resources from cache for namespace %s", len(resources), namespace)
        return _CacheEntry(resources, modified_at)

    def _persist(self, namespace: str, resources: List[TaggedResource]) -> None:
        data = json.dumps([resource.to_dict() for resource in resources]).encode("utf-8")
        try:
            self._storage.write(namespace, data)
        except OSError as exc:
            _logger.error("Failed to write resource cache for namespace %s: %s", namespace, exc)
