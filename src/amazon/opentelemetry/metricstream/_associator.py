# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from abc import ABC, abstractmethod
from logging import Logger, getLogger
from typing import Dict, List, Optional, Sequence, Tuple

from typing_extensions import override

from amazon.opentelemetry.metricstream._descriptor import MetricDescriptor
from amazon.opentelemetry.metricstream._supported_services import ServiceConfig
from amazon.opentelemetry.metricstream._tagging import TaggedResource

_logger: Logger = getLogger(__name__)

_Signature = Tuple[Tuple[str, str], ...]


class Associator(ABC):
    @abstractmethod
    def associate(self, descriptor: MetricDescriptor) -> Tuple[Optional[TaggedResource], bool]:
        """
        Find the resource a metric belongs to.

        Returns (resource, skip). A None resource with skip False means the metric is not tied to
        any discovered resource. skip True means the metric belongs to a resource that was not
        discovered, and must not be labelled with any resource.
        """


class _DimensionsMapping:
    def __init__(self, dimensions: List[str]):
        self.dimensions = dimensions
        self.resources: Dict[_Signature, TaggedResource] = {}


def _signature(labels: Dict[str, str]) -> _Signature:
    return tuple(sorted(labels.items()))


class MaxDimensionAssociator(Associator):
    """
    Associates metrics with resources by the dimension values encoded in resource ARNs.

    Each dimension regexp of the service extracts a set of dimension values from the ARNs of the
    discovered resources. A metric is matched with the mapping that has the most dimensions among
    those whose dimension names are all present on the metric.
    """

    def __init__(self, service: ServiceConfig, resources: Sequence[TaggedResource]):
        self._mappings: List[_DimensionsMapping] = []
        for regexp in service.dimension_regexps:
            mapping = _DimensionsMapping(sorted(regexp.groupindex))
            for resource in resources:
                match = regexp.search(resource.arn)
                if match is None:
                    continue
                labels = {name: value for name, value in match.groupdict().items() if value is not None}
                mapping.resources.setdefault(_signature(labels), resource)
            if mapping.resources:
                self._mappings.append(mapping)
        # Stable sort keeps the service's regexp order for mappings of equal size
        self._mappings.sort(key=lambda mapping: len(mapping.dimensions), reverse=True)
        _logger.debug(
            "Built associator for namespace %s with %s dimension mappings", service.namespace, len(self._mappings)
        )

    @override
    def associate(self, descriptor: MetricDescriptor) -> Tuple[Optional[TaggedResource], bool]:
        if not descriptor.dimensions:
            return None, False

        values = {dimension.name: dimension.value for dimension in descriptor.dimensions}
        mapping_found = False
        for mapping in self._mappings:
            if not all(name in values for name in mapping.dimensions):
                continue
            mapping_found = True
            labels = {name: values[name] for name in mapping.dimensions}
            resource = mapping.resources.get(_signature(labels))
            if resource is not None:
                return resource, False

        if mapping_found:
            _logger.debug(
                "No resource matched metric %s/%s, skipping resource labels",
                descriptor.namespace,
                descriptor.metric_name,
            )
        return None, mapping_found
