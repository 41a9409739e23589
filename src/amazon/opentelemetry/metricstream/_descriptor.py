# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Parsing of CloudWatch Metric Streams (OpenTelemetry 1.0 format) attributes.

Every summary data point of a metric stream carries its CloudWatch identity as attributes:
"Namespace" and "MetricName" as strings, and "Dimensions" as a key/value list.
The resource of each ResourceMetrics carries "cloud.account.id" and "cloud.region".
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from opentelemetry.proto.common.v1.common_pb2 import KeyValue
from opentelemetry.proto.metrics.v1.metrics_pb2 import ResourceMetrics

NAMESPACE_ATTRIBUTE = "Namespace"
METRIC_NAME_ATTRIBUTE = "MetricName"
DIMENSIONS_ATTRIBUTE = "Dimensions"
STATISTIC_ATTRIBUTES = ("Statistic", "statistic")

CLOUD_ACCOUNT_ID = "cloud.account.id"
CLOUD_REGION = "cloud.region"


@dataclass(frozen=True)
class Dimension:
    name: str
    value: str


@dataclass
class MetricDescriptor:
    namespace: str = ""
    metric_name: str = ""
    dimensions: List[Dimension] = field(default_factory=list)

    def is_complete(self) -> bool:
        return bool(self.namespace) and bool(self.metric_name)

    def dimension_names(self) -> List[str]:
        return [dimension.name for dimension in self.dimensions]


@dataclass(frozen=True)
class ResourceContext:
    account_id: str = ""
    region: str = ""


def extract_descriptor(attributes: Sequence[KeyValue]) -> MetricDescriptor:
    descriptor = MetricDescriptor()
    for attribute in attributes:
        if not attribute.HasField("value"):
            continue
        if attribute.key == METRIC_NAME_ATTRIBUTE:
            descriptor.metric_name = attribute.value.string_value
        elif attribute.key == NAMESPACE_ATTRIBUTE:
            descriptor.namespace = attribute.value.string_value
        elif attribute.key == DIMENSIONS_ATTRIBUTE and attribute.value.HasField("kvlist_value"):
            for entry in attribute.value.kvlist_value.values:
                if entry.HasField("value"):
                    descriptor.dimensions.append(Dimension(entry.key, entry.value.string_value))
    return descriptor


def attribute_value(attributes: Sequence[KeyValue], key: str) -> str:
    """Return the string value of the first attribute named key, or an empty string."""
    for attribute in attributes:
        if attribute.key == key:
            return attribute.value.string_value
    return ""


def extract_statistic(attributes: Sequence[KeyValue]) -> str:
    for key in STATISTIC_ATTRIBUTES:
        statistic = attribute_value(attributes, key)
        if statistic:
            return statistic
    return ""


def extract_resource_context(
    resource_metrics: Optional[ResourceMetrics], default_region: Optional[str] = None
) -> ResourceContext:
    """Read the account and region of a ResourceMetrics, falling back to default_region for the region."""
    account_id = ""
    region = ""
    if resource_metrics is not None and resource_metrics.HasField("resource"):
        for attribute in resource_metrics.resource.attributes:
            if attribute.key == CLOUD_ACCOUNT_ID:
                account_id = attribute.value.string_value
            elif attribute.key == CLOUD_REGION:
                region = attribute.value.string_value
    return ResourceContext(account_id=account_id, region=region or default_region or "")
