# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from logging import Logger, getLogger
from typing import List, Mapping, Optional, Sequence

from amazon.opentelemetry.metricstream._descriptor import MetricDescriptor, ResourceContext
from amazon.opentelemetry.metricstream._prometheus_naming import prom_string_tag
from amazon.opentelemetry.metricstream._tagging import TaggedResource
from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue

_logger: Logger = getLogger(__name__)

REGION_LABEL = "region"
ACCOUNT_ID_LABEL = "account_id"
NAMESPACE_LABEL = "namespace"
NAME_LABEL = "name"
DIMENSION_LABEL_PREFIX = "dimension_"
TAG_LABEL_PREFIX = "tag_"
CUSTOM_TAG_LABEL_PREFIX = "custom_tag_"

# Value of the name label for metrics that are not associated with a resource
GLOBAL_RESOURCE_NAME = "global"


def _string_label(key: str, value: str) -> KeyValue:
    return KeyValue(key=key, value=AnyValue(string_value=value))


def build_labels(
    descriptor: MetricDescriptor,
    resource: Optional[TaggedResource],
    skip: bool,
    context: ResourceContext,
    exported_tags: Optional[Sequence[str]] = None,
    static_labels: Optional[Mapping[str, str]] = None,
    default_labels: bool = False,
    labels_snake_case: bool = True,
) -> List[KeyValue]:
    """
    Build YACE labels for a data point, in order: region, account_id, namespace, name,
    dimension_*, tag_* and custom_tag_*.

    Dimension, tag and static label names that are not valid Prometheus label names once
    normalized are dropped with a warning.
    """
    labels: List[KeyValue] = []
    matched = resource is not None and not skip

    if context.region:
        labels.append(_string_label(REGION_LABEL, context.region))
    if context.account_id:
        labels.append(_string_label(ACCOUNT_ID_LABEL, context.account_id))
    if descriptor.namespace:
        labels.append(_string_label(NAMESPACE_LABEL, descriptor.namespace))
    labels.append(_string_label(NAME_LABEL, resource.arn if matched else GLOBAL_RESOURCE_NAME))

    for dimension in descriptor.dimensions:
        valid, name = prom_string_tag(dimension.name, labels_snake_case)
        if not valid:
            _logger.warning("Dimension name %s is an invalid prometheus label name", dimension.name)
            continue
        labels.append(_string_label(DIMENSION_LABEL_PREFIX + name, dimension.value))

    if matched:
        tags = resource.metric_tags(exported_tags) if exported_tags else resource.tags
        for tag in tags:
            valid, name = prom_string_tag(tag.key, labels_snake_case)
            if not valid:
                _logger.warning("Metric tag name %s is an invalid prometheus label name", tag.key)
                continue
            labels.append(_string_label(TAG_LABEL_PREFIX + name, tag.value))

    if static_labels and (matched or default_labels):
        for key, value in static_labels.items():
            valid, name = prom_string_tag(key, labels_snake_case)
            if not valid:
                _logger.warning("Custom tag name %s is an invalid prometheus label name", key)
                continue
            labels.append(_string_label(CUSTOM_TAG_LABEL_PREFIX + name, value))

    return labels
