# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from abc import ABC, abstractmethod
from logging import Logger, getLogger
from typing import Any, Dict, List, Optional, Sequence

from botocore.session import Session
from typing_extensions import override

from amazon.opentelemetry.metricstream._supported_services import get_service
from amazon.opentelemetry.metricstream.exceptions import NoResourcesFoundError

_logger: Logger = getLogger(__name__)

# Max allowed value according to the GetResources API documentation
_RESOURCES_PER_PAGE = 100


class Tag:
    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return False
        return self.key == other.key and self.value == other.value

    def __repr__(self) -> str:
        return f"Tag({self.key!r}, {self.value!r})"


class TaggedResource:
    """An AWS resource discovered through its tags, with the namespace and region it was discovered in."""

    def __init__(self, arn: str, namespace: str, region: str, tags: Optional[List[Tag]] = None):
        self.arn = arn
        self.namespace = namespace
        self.region = region
        self.tags: List[Tag] = tags if tags is not None else []

    def metric_tags(self, exported_tags: Sequence[str]) -> List[Tag]:
        """
        Project the resource tags onto an allow-list of tag keys.

        Every allow-listed key is returned, with an empty value when the resource does not
        carry it, so that all metrics of a service expose the same set of labels.
        """
        if not exported_tags:
            return []
        values = {}
        for tag in self.tags:
            values.setdefault(tag.key, tag.value)
        return [Tag(key, values.get(key, "")) for key in exported_tags]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ARN": self.arn,
            "Namespace": self.namespace,
            "Region": self.region,
            "Tags": [{"Key": tag.key, "Value": tag.value} for tag in self.tags],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaggedResource":
        """Build a resource from its cached representation; raises KeyError or TypeError when malformed."""
        tags = [Tag(str(tag["Key"]), str(tag["Value"])) for tag in data.get("Tags") or []]
        return cls(str(data["ARN"]), str(data["Namespace"]), str(data["Region"]), tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaggedResource):
            return False
        return (
            self.arn == other.arn
            and self.namespace == other.namespace
            and self.region == other.region
            and self.tags == other.tags
        )

    def __repr__(self) -> str:
        return f"TaggedResource(arn={self.arn!r}, namespace={self.namespace!r}, tags={self.tags!r})"


class ResourceDiscovery(ABC):
    @abstractmethod
    def get_resources(self, namespace: str, region: Optional[str]) -> List[TaggedResource]:
        """
        Return the tagged resources of a namespace in a region.

        Raises NoResourcesFoundError when resources were expected but none were found.
        Any other exception is a discovery failure.
        """


class TaggingApiResourceDiscovery(ResourceDiscovery):
    """Discovers resources with the Resource Groups Tagging API GetResources operation."""

    def __init__(self, session: Optional[Session] = None, **client_kwargs):
        self._session = session or Session()
        self._client_kwargs = client_kwargs
        self._clients: Dict[Optional[str], Any] = {}

    def _get_client(self, region: Optional[str]):
        client = self._clients.get(region)
        if client is None:
            client = self._session.create_client("resourcegroupstaggingapi", region_name=region, **self._client_kwargs)
            self._clients[region] = client
        return client

    @override
    def get_resources(self, namespace: str, region: Optional[str]) -> List[TaggedResource]:
        service = get_service(namespace)
        if service is None or not service.resource_filters:
            return []

        resources: List[TaggedResource] = []
        paginator = self._get_client(region).get_paginator("get_resources")
        for page in paginator.paginate(
            ResourceTypeFilters=service.resource_filters, ResourcesPerPage=_RESOURCES_PER_PAGE
        ):
            for mapping in page.get("ResourceTagMappingList", []):
                tags = [Tag(tag["Key"], tag["Value"]) for tag in mapping.get("Tags", [])]
                resources.append(TaggedResource(mapping["ResourceARN"], namespace, region or "", tags))

        _logger.debug("Discovered %s tagged resources for namespace %s", len(resources), namespace)
        if not resources:
            raise NoResourcesFoundError(f"expected to find resources for namespace {namespace}")
        return resources
