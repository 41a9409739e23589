# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Enrichment of decoded CloudWatch metric stream requests.

Every summary data point of a supported namespace is labelled with the identity and tags of the
resource it belongs to. In YACE compatibility mode, summaries are then expanded into one gauge per
enabled statistic; otherwise the summary keeps its shape and only its name and attributes change.
"""
from logging import Logger, getLogger
from typing import Callable, Dict, List, Optional, Sequence, Set

from amazon.opentelemetry.metricstream._associator import Associator, MaxDimensionAssociator
from amazon.opentelemetry.metricstream._descriptor import (
    MetricDescriptor,
    ResourceContext,
    extract_descriptor,
    extract_resource_context,
    extract_statistic,
)
from amazon.opentelemetry.metricstream._labels import build_labels
from amazon.opentelemetry.metricstream._prometheus_naming import build_metric_name
from amazon.opentelemetry.metricstream._resource_cache import ResourceTagCache
from amazon.opentelemetry.metricstream._statistics import summary_to_gauges
from amazon.opentelemetry.metricstream._supported_services import ServiceConfig, get_service
from amazon.opentelemetry.metricstream._tagging import TaggedResource
from amazon.opentelemetry.metricstream.config import EnricherConfig
from amazon.opentelemetry.metricstream.exceptions import ResourceFetchError
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import ExportMetricsServiceRequest
from opentelemetry.proto.metrics.v1.metrics_pb2 import Metric

_logger: Logger = getLogger(__name__)

AssociatorFactory = Callable[[ServiceConfig, Sequence[TaggedResource]], Associator]


class MetricStreamEnricher:
    """
    Enriches the requests of one invocation.

    Resources and associators are resolved once per namespace and kept for the lifetime of the
    enricher, so an enricher should not outlive the invocation it was created for.
    """

    def __init__(
        self,
        config: EnricherConfig,
        cache: ResourceTagCache,
        associator_factory: Optional[AssociatorFactory] = None,
    ):
        self._config = config
        self._cache = cache
        self._associator_factory: AssociatorFactory = associator_factory or MaxDimensionAssociator
        self._resources: Dict[str, List[TaggedResource]] = {}
        self._associators: Dict[str, Associator] = {}
        self._failed_namespaces: Set[str] = set()

    def enrich(self, requests: Sequence[ExportMetricsServiceRequest]) -> None:
        """
        Enrich requests in place.

        Raises ResourceFetchError on the first resource discovery failure when resource failures
        must not be tolerated.
        """
        for request in requests:
            for resource_metrics in request.resource_metrics:
                context = extract_resource_context(resource_metrics, self._config.region)
                for scope_metrics in resource_metrics.scope_metrics:
                    transformed: List[Metric] = []
                    for metric in scope_metrics.metrics:
                        transformed.extend(self.transform_metric(metric, context))
                    if self._config.yace_compat_mode:
                        # Copy the results in before dropping the original metrics they may reference
                        original_count = len(scope_metrics.metrics)
                        scope_metrics.metrics.extend(transformed)
                        del scope_metrics.metrics[:original_count]

    def transform_metric(self, metric: Metric, context: ResourceContext) -> List[Metric]:
        """
        Transform one metric into the metrics that replace it.

        In compatibility mode the summary is renamed and its data point attributes replaced, and the
        returned list holds the metric itself. In expansion mode the returned list holds the gauges of
        every enriched data point. Metrics that are not summaries are returned unchanged.
        """
        if metric.WhichOneof("data") != "summary":
            _logger.debug("Unsupported metric type %s for metric %s", metric.WhichOneof("data"), metric.name)
            return [metric]

        gauges: List[Metric] = []
        for data_point in metric.summary.data_points:
            descriptor = extract_descriptor(data_point.attributes)
            if not descriptor.is_complete():
                _logger.debug(
                    "Metric name or namespace is missing, skipping tags enrichment: namespace=%s metric=%s",
                    descriptor.namespace,
                    descriptor.metric_name,
                )
                continue
            service = get_service(descriptor.namespace)
            if service is None:
                _logger.debug(
                    "Unsupported namespace, skipping tags enrichment: namespace=%s metric=%s",
                    descriptor.namespace,
                    descriptor.metric_name,
                )
                continue

            associator = self._get_associator(service, descriptor)
            if associator is None:
                continue

            resource, skip = associator.associate(descriptor)
            labels = build_labels(
                descriptor,
                resource,
                skip,
                context,
                exported_tags=self._config.exported_tags,
                static_labels=self._config.static_labels,
                default_labels=self._config.default_labels,
                labels_snake_case=self._config.labels_snake_case,
            )

            if self._config.yace_compat_mode:
                gauges.extend(summary_to_gauges(descriptor, data_point, labels, self._config.yace_compat_stats))
            else:
                statistic = extract_statistic(data_point.attributes)
                metric.name = build_metric_name(descriptor.namespace, descriptor.metric_name, statistic)
                del data_point.attributes[:]
                data_point.attributes.extend(labels)

        if self._config.yace_compat_mode:
            return gauges
        return [metric]

    def _get_associator(self, service: ServiceConfig, descriptor: MetricDescriptor) -> Optional[Associator]:
        namespace = descriptor.namespace
        if namespace in self._failed_namespaces:
            return None
        if namespace not in self._resources:
            try:
                self._resources[namespace] = self._cache.get(namespace)
            except ResourceFetchError as exc:
                if not self._config.continue_on_resource_failure:
                    raise
                _logger.error("Failed to get resources for namespace %s: %s", namespace, exc.cause)
                self._failed_namespaces.add(namespace)
                return None

        associator = self._associators.get(namespace)
        if associator is None:
            associator = self._associator_factory(service, self._resources[namespace])
            self._associators[namespace] = associator
        return associator
