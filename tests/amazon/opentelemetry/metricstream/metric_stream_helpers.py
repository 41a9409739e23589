# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from typing import Dict, List, Optional, Sequence, Tuple

from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import ExportMetricsServiceRequest
from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue, KeyValueList
from opentelemetry.proto.metrics.v1.metrics_pb2 import (
    Gauge,
    Metric,
    NumberDataPoint,
    ResourceMetrics,
    ScopeMetrics,
    Summary,
    SummaryDataPoint,
)
from opentelemetry.proto.resource.v1.resource_pb2 import Resource

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"
TIME_UNIX_NANO = 1700000060000000000
START_TIME_UNIX_NANO = 1700000000000000000


def string_attribute(key: str, value: str) -> KeyValue:
    return KeyValue(key=key, value=AnyValue(string_value=value))


def cloudwatch_attributes(
    namespace: Optional[str] = "AWS/EC2",
    metric_name: Optional[str] = "CPUUtilization",
    dimensions: Optional[Dict[str, str]] = None,
    statistic: Optional[str] = None,
) -> List[KeyValue]:
    attributes = []
    if namespace is not None:
        attributes.append(string_attribute("Namespace", namespace))
    if metric_name is not None:
        attributes.append(string_attribute("MetricName", metric_name))
    if dimensions:
        entries = [string_attribute(name, value) for name, value in dimensions.items()]
        attributes.append(KeyValue(key="Dimensions", value=AnyValue(kvlist_value=KeyValueList(values=entries))))
    if statistic is not None:
        attributes.append(string_attribute("Statistic", statistic))
    return attributes


def summary_data_point(
    attributes: Sequence[KeyValue],
    count: int = 10,
    sum_value: float = 50.0,
    quantiles: Sequence[Tuple[float, float]] = ((0.0, 2.0), (1.0, 10.0)),
) -> SummaryDataPoint:
    return SummaryDataPoint(
        attributes=attributes,
        start_time_unix_nano=START_TIME_UNIX_NANO,
        time_unix_nano=TIME_UNIX_NANO,
        count=count,
        sum=sum_value,
        quantile_values=[
            SummaryDataPoint.ValueAtQuantile(quantile=quantile, value=value) for quantile, value in quantiles
        ],
    )


def summary_metric(name: str, data_points: Sequence[SummaryDataPoint]) -> Metric:
    return Metric(name=name, unit="Percent", summary=Summary(data_points=data_points))


def gauge_metric(name: str, value: float) -> Metric:
    return Metric(
        name=name,
        gauge=Gauge(data_points=[NumberDataPoint(time_unix_nano=TIME_UNIX_NANO, as_double=value)]),
    )


def export_request(
    metrics: Sequence[Metric], account_id: Optional[str] = ACCOUNT_ID, region: Optional[str] = REGION
) -> ExportMetricsServiceRequest:
    resource_attributes = []
    if account_id is not None:
        resource_attributes.append(string_attribute("cloud.account.id", account_id))
    if region is not None:
        resource_attributes.append(string_attribute("cloud.region", region))
    return ExportMetricsServiceRequest(
        resource_metrics=[
            ResourceMetrics(
                resource=Resource(attributes=resource_attributes),
                scope_metrics=[ScopeMetrics(metrics=metrics)],
            )
        ]
    )


def labels_as_dict(attributes: Sequence[KeyValue]) -> Dict[str, str]:
    return {attribute.key: attribute.value.string_value for attribute in attributes}


def label_keys(attributes: Sequence[KeyValue]) -> List[str]:
    return [attribute.key for attribute in attributes]
