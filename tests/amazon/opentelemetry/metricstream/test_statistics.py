# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from unittest import TestCase

from metric_stream_helpers import (
    START_TIME_UNIX_NANO,
    TIME_UNIX_NANO,
    cloudwatch_attributes,
    string_attribute,
    summary_data_point,
)

from amazon.opentelemetry.metricstream._descriptor import MetricDescriptor
from amazon.opentelemetry.metricstream._statistics import (
    DEFAULT_STATISTICS,
    new_gauge,
    quantile_to_statistic,
    summary_to_gauges,
)


class TestQuantileToStatistic(TestCase):
    def test_quantile_to_statistic(self):
        cases = {
            0.0: "Minimum",
            1.0: "Maximum",
            0.5: "p50",
            0.95: "p95",
            0.99: "p99",
            0.999: "p99_9",
        }
        for quantile, statistic in cases.items():
            self.assertEqual(quantile_to_statistic(quantile), statistic, quantile)


class TestSummaryToGauges(TestCase):
    def setUp(self):
        self.descriptor = MetricDescriptor(namespace="AWS/EC2", metric_name="CPUUtilization")
        self.labels = [string_attribute("namespace", "AWS/EC2"), string_attribute("name", "global")]

    def _gauges(self, data_point, statistics=DEFAULT_STATISTICS):
        return summary_to_gauges(self.descriptor, data_point, self.labels, frozenset(statistics))

    def test_default_statistics_produce_five_gauges(self):
        gauges = self._gauges(summary_data_point(cloudwatch_attributes()))

        self.assertEqual(
            [gauge.name for gauge in gauges],
            [
                "aws_ec2_cpuutilization_sample_count",
                "aws_ec2_cpuutilization_sum",
                "aws_ec2_cpuutilization_average",
                "aws_ec2_cpuutilization_minimum",
                "aws_ec2_cpuutilization_maximum",
            ],
        )
        self.assertEqual(
            [gauge.gauge.data_points[0].as_double for gauge in gauges],
            [10.0, 50.0, 5.0, 2.0, 10.0],
        )
        for gauge in gauges:
            self.assertEqual(len(gauge.gauge.data_points), 1)
            data_point = gauge.gauge.data_points[0]
            self.assertEqual(data_point.time_unix_nano, TIME_UNIX_NANO)
            self.assertEqual(data_point.start_time_unix_nano, START_TIME_UNIX_NANO)
            self.assertEqual(list(data_point.attributes), self.labels)

    def test_no_average_when_count_is_zero(self):
        gauges = self._gauges(summary_data_point(cloudwatch_attributes(), count=0, sum_value=0.0))

        names = [gauge.name for gauge in gauges]
        self.assertNotIn("aws_ec2_cpuutilization_average", names)
        self.assertIn("aws_ec2_cpuutilization_sample_count", names)

    def test_only_enabled_statistics_are_emitted(self):
        data_point = summary_data_point(cloudwatch_attributes(), quantiles=((0.0, 2.0), (0.95, 9.0), (1.0, 10.0)))

        gauges = self._gauges(data_point, statistics=["Average", "p95"])

        self.assertEqual(
            [(gauge.name, gauge.gauge.data_points[0].as_double) for gauge in gauges],
            [("aws_ec2_cpuutilization_average", 5.0), ("aws_ec2_cpuutilization_p95", 9.0)],
        )

    def test_percentile_not_enabled_by_default(self):
        data_point = summary_data_point(cloudwatch_attributes(), quantiles=((0.99, 9.5),))

        gauges = self._gauges(data_point)

        self.assertNotIn("aws_ec2_cpuutilization_p99", [gauge.name for gauge in gauges])

    def test_non_finite_quantiles_are_skipped(self):
        quantiles = ((float("nan"), 1.0), (0.0, 2.0), (float("inf"), 3.0), (float("-inf"), 4.0), (1.0, 10.0))
        data_point = summary_data_point(cloudwatch_attributes(), quantiles=quantiles)

        gauges = self._gauges(data_point)

        self.assertEqual(
            [(gauge.name, gauge.gauge.data_points[0].as_double) for gauge in gauges],
            [
                ("aws_ec2_cpuutilization_sample_count", 10.0),
                ("aws_ec2_cpuutilization_sum", 50.0),
                ("aws_ec2_cpuutilization_average", 5.0),
                ("aws_ec2_cpuutilization_minimum", 2.0),
                ("aws_ec2_cpuutilization_maximum", 10.0),
            ],
        )

    def test_new_gauge(self):
        gauge = new_gauge("metric", 1.5, 20, 10, self.labels)

        self.assertEqual(gauge.name, "metric")
        self.assertEqual(gauge.WhichOneof("data"), "gauge")
        data_point = gauge.gauge.data_points[0]
        self.assertEqual(data_point.as_double, 1.5)
        self.assertEqual(data_point.time_unix_nano, 20)
        self.assertEqual(data_point.start_time_unix_nano, 10)
