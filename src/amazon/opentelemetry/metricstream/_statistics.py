# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Expansion of CloudWatch summary data points into one gauge per statistic, the way YACE
exposes each CloudWatch statistic as its own metric.
"""
import math
from logging import Logger, getLogger
from typing import AbstractSet, List, Sequence

from amazon.opentelemetry.metricstream._descriptor import MetricDescriptor
from amazon.opentelemetry.metricstream._prometheus_naming import build_metric_name
from opentelemetry.proto.common.v1.common_pb2 import KeyValue
from opentelemetry.proto.metrics.v1.metrics_pb2 import Gauge, Metric, NumberDataPoint, SummaryDataPoint

_logger: Logger = getLogger(__name__)

SAMPLE_COUNT = "SampleCount"
SUM = "Sum"
AVERAGE = "Average"
MINIMUM = "Minimum"
MAXIMUM = "Maximum"

DEFAULT_STATISTICS = (MAXIMUM, MINIMUM, AVERAGE, SUM, SAMPLE_COUNT)


def quantile_to_statistic(quantile: float) -> str:
    """Map a summary quantile to a CloudWatch statistic name, e.g. 0.0 -> Minimum, 0.95 -> p95, 0.999 -> p99_9."""
    if quantile == 0.0:
        return MINIMUM
    if quantile == 1.0:
        return MAXIMUM
    percentile = quantile * 100
    if percentile == int(percentile):
        return f"p{percentile:.0f}"
    return "p" + f"{percentile:.1f}".replace(".", "_")


def new_gauge(
    name: str, value: float, time_unix_nano: int, start_time_unix_nano: int, attributes: Sequence[KeyValue]
) -> Metric:
    data_point = NumberDataPoint(
        attributes=attributes,
        start_time_unix_nano=start_time_unix_nano,
        time_unix_nano=time_unix_nano,
        as_double=value,
    )
    return Metric(name=name, gauge=Gauge(data_points=[data_point]))


def summary_to_gauges(
    descriptor: MetricDescriptor,
    data_point: SummaryDataPoint,
    attributes: Sequence[KeyValue],
    enabled_statistics: AbstractSet[str],
) -> List[Metric]:
    """
    Convert a summary data point into gauges for the enabled statistics: SampleCount, Sum,
    Average (sum / count, only when count > 0), then Minimum, Maximum and percentiles from
    the quantile values. Each gauge carries the timestamps and attributes of the data point.
    """
    gauges: List[Metric] = []
    timestamp = data_point.time_unix_nano
    start_timestamp = data_point.start_time_unix_nano
    count = data_point.count

    def _add(statistic: str, value: float) -> None:
        name = build_metric_name(descriptor.namespace, descriptor.metric_name, statistic)
        gauges.append(new_gauge(name, value, timestamp, start_timestamp, attributes))

    if SAMPLE_COUNT in enabled_statistics:
        _add(SAMPLE_COUNT, float(count))
    if SUM in enabled_statistics:
        _add(SUM, data_point.sum)
    if AVERAGE in enabled_statistics and count > 0:
        _add(AVERAGE, data_point.sum / count)

    for quantile_value in data_point.quantile_values:
        if not math.isfinite(quantile_value.quantile):
            _logger.debug(
                "Skipping non-finite quantile %s of %s %s",
                quantile_value.quantile,
                descriptor.namespace,
                descriptor.metric_name,
            )
            continue
        statistic = quantile_to_statistic(quantile_value.quantile)
        if statistic in enabled_statistics:
            _add(statistic, quantile_value.value)

    return gauges
