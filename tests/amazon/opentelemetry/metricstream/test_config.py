# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
import os
from unittest import TestCase
from unittest.mock import patch

from amazon.opentelemetry.metricstream.config import (
    OUTPUT_MODE_ENHANCED,
    OUTPUT_MODE_PASS_THROUGH,
    PROTOCOL_GRPC,
    PROTOCOL_HTTP_PROTOBUF,
    EnricherConfig,
    parse_duration,
    parse_exported_tags,
    parse_headers,
    parse_static_labels,
    parse_statistics,
)
from amazon.opentelemetry.metricstream.exceptions import ConfigurationError

_DEFAULT_STATISTICS = frozenset({"Maximum", "Minimum", "Average", "Sum", "SampleCount"})


class TestParseStaticLabels(TestCase):
    def test_valid_labels(self):
        self.assertEqual(parse_static_labels('["a=b","c=d"]'), {"a": "b", "c": "d"})

    def test_value_may_contain_equals(self):
        self.assertEqual(parse_static_labels('["a=b=c"]'), {"a": "b=c"})

    def test_empty(self):
        self.assertEqual(parse_static_labels(""), {})
        self.assertEqual(parse_static_labels(None), {})
        self.assertEqual(parse_static_labels("[]"), {})

    def test_invalid_labels(self):
        for value in ("env=prod,team", '["noequals"]', '[""]', '{"a": "b"}', "[1]"):
            with self.assertRaises(ConfigurationError, msg=value):
                parse_static_labels(value)


class TestParseLists(TestCase):
    def test_exported_tags(self):
        self.assertEqual(parse_exported_tags('["Name","Environment"]'), ["Name", "Environment"])
        self.assertEqual(parse_exported_tags(""), [])
        with self.assertRaises(ConfigurationError):
            parse_exported_tags("Name")

    def test_statistics(self):
        self.assertEqual(parse_statistics('["Average","p99"]'), frozenset({"Average", "p99"}))
        self.assertEqual(parse_statistics(""), _DEFAULT_STATISTICS)
        self.assertEqual(parse_statistics("[]"), _DEFAULT_STATISTICS)
        with self.assertRaises(ConfigurationError):
            parse_statistics("[Average]")


class TestParseDuration(TestCase):
    def test_parse_duration(self):
        cases = {
            "1h": datetime.timedelta(hours=1),
            "90s": datetime.timedelta(seconds=90),
            "1h30m": datetime.timedelta(hours=1, minutes=30),
            "1.5h": datetime.timedelta(minutes=90),
            "250ms": datetime.timedelta(milliseconds=250),
            "0": datetime.timedelta(0),
            "-5m": datetime.timedelta(minutes=-5),
        }
        for value, expected in cases.items():
            self.assertEqual(parse_duration(value), expected, value)

    def test_invalid_duration(self):
        for value in ("", "10", "1d", "h", "1h foo"):
            with self.assertRaises(ConfigurationError, msg=value):
                parse_duration(value)


class TestParseHeaders(TestCase):
    def test_parse_headers(self):
        self.assertEqual(
            parse_headers("api-key=secret, x-scope = tenant=a,invalid"),
            {"api-key": "secret", "x-scope": "tenant=a"},
        )
        self.assertEqual(parse_headers(None), {})


class TestEnricherConfig(TestCase):
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = EnricherConfig.from_env()

        self.assertIsNone(config.region)
        self.assertTrue(config.continue_on_resource_failure)
        self.assertTrue(config.continue_on_export_failure)
        self.assertTrue(config.file_cache_enabled)
        self.assertEqual(config.file_cache_expiration, datetime.timedelta(hours=1))
        self.assertEqual(config.file_cache_path, "/tmp")
        self.assertEqual(config.static_labels, {})
        self.assertFalse(config.default_labels)
        self.assertTrue(config.labels_snake_case)
        self.assertEqual(config.exported_tags, [])
        self.assertEqual(config.output_mode, OUTPUT_MODE_PASS_THROUGH)
        self.assertFalse(config.yace_compat_mode)
        self.assertEqual(config.yace_compat_stats, _DEFAULT_STATISTICS)
        self.assertIsNone(config.otlp_endpoint)
        self.assertEqual(config.otlp_timeout, datetime.timedelta(seconds=5))
        self.assertEqual(config.otlp_headers, {})
        self.assertTrue(config.otlp_insecure)
        self.assertEqual(config.otlp_protocol, PROTOCOL_GRPC)

    @patch.dict(
        os.environ,
        {
            "AWS_REGION": "eu-west-1",
            "CONTINUE_ON_RESOURCE_FAILURE": "false",
            "CONTINUE_ON_EXPORT_FAILURE": "FALSE",
            "FILE_CACHE_ENABLED": "no",
            "FILE_CACHE_EXPIRATION": "30m",
            "FILE_CACHE_PATH": "/var/cache",
            "STATIC_LABELS": '["env=prod"]',
            "DEFAULT_LABELS": "true",
            "LABELS_SNAKE_CASE": "false",
            "EXPORTED_TAGS_ON_METRICS": '["Name"]',
            "FIREHOSE_OUTPUT_MODE": "Enhanced",
            "YACE_COMPAT_MODE": "True",
            "YACE_COMPAT_STATS": '["Average"]',
            "OTEL_EXPORTER_OTLP_ENDPOINT": "http://collector:4318",
            "OTEL_EXPORTER_OTLP_TIMEOUT": "10s",
            "OTEL_EXPORTER_OTLP_HEADERS": "api-key=secret",
            "OTEL_EXPORTER_OTLP_INSECURE": "false",
            "OTEL_EXPORTER_OTLP_PROTOCOL": "HTTP/Protobuf",
        },
        clear=True,
    )
    def test_from_env(self):
        config = EnricherConfig.from_env()

        self.assertEqual(config.region, "eu-west-1")
        self.assertFalse(config.continue_on_resource_failure)
        self.assertFalse(config.continue_on_export_failure)
        self.assertFalse(config.file_cache_enabled)
        self.assertEqual(config.file_cache_expiration, datetime.timedelta(minutes=30))
        self.assertEqual(config.file_cache_path, "/var/cache")
        self.assertEqual(config.static_labels, {"env": "prod"})
        self.assertTrue(config.default_labels)
        self.assertFalse(config.labels_snake_case)
        self.assertEqual(config.exported_tags, ["Name"])
        self.assertEqual(config.output_mode, OUTPUT_MODE_ENHANCED)
        self.assertTrue(config.yace_compat_mode)
        self.assertEqual(config.yace_compat_stats, frozenset({"Average"}))
        self.assertEqual(config.otlp_endpoint, "http://collector:4318")
        self.assertEqual(config.otlp_timeout, datetime.timedelta(seconds=10))
        self.assertEqual(config.otlp_headers, {"api-key": "secret"})
        self.assertFalse(config.otlp_insecure)
        self.assertEqual(config.otlp_protocol, PROTOCOL_HTTP_PROTOBUF)

    @patch.dict(
        os.environ,
        {
            "STATIC_LABELS": "env=prod,team",
            "EXPORTED_TAGS_ON_METRICS": "Name",
            "YACE_COMPAT_STATS": "Average",
            "FILE_CACHE_EXPIRATION": "one hour",
            "FIREHOSE_OUTPUT_MODE": "json",
            "OTEL_EXPORTER_OTLP_PROTOCOL": "http/json",
        },
        clear=True,
    )
    def test_invalid_values_fall_back_to_defaults(self):
        with self.assertLogs("amazon.opentelemetry.metricstream.config", level="WARNING") as logs:
            config = EnricherConfig.from_env()

        self.assertEqual(config.static_labels, {})
        self.assertEqual(config.exported_tags, [])
        self.assertEqual(config.yace_compat_stats, _DEFAULT_STATISTICS)
        self.assertEqual(config.file_cache_expiration, datetime.timedelta(hours=1))
        self.assertEqual(config.output_mode, OUTPUT_MODE_PASS_THROUGH)
        self.assertEqual(config.otlp_protocol, PROTOCOL_GRPC)
        self.assertEqual(len(logs.records), 6)
