# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Environment variable configuration of the metric stream enricher.

Values that fail to parse are logged and replaced by their documented default, so a
misconfigured variable never prevents records from being processed.
"""
import datetime
import json
import os
import re
from logging import Logger, getLogger
from typing import Dict, FrozenSet, List, Optional

from amazon.opentelemetry.metricstream._statistics import DEFAULT_STATISTICS
from amazon.opentelemetry.metricstream.exceptions import ConfigurationError

_logger: Logger = getLogger(__name__)

AWS_REGION_CONFIG = "AWS_REGION"
LOG_LEVEL_CONFIG = "LOG_LEVEL"
CONTINUE_ON_RESOURCE_FAILURE_CONFIG = "CONTINUE_ON_RESOURCE_FAILURE"
CONTINUE_ON_EXPORT_FAILURE_CONFIG = "CONTINUE_ON_EXPORT_FAILURE"
FILE_CACHE_ENABLED_CONFIG = "FILE_CACHE_ENABLED"
FILE_CACHE_EXPIRATION_CONFIG = "FILE_CACHE_EXPIRATION"
FILE_CACHE_PATH_CONFIG = "FILE_CACHE_PATH"
STATIC_LABELS_CONFIG = "STATIC_LABELS"
DEFAULT_LABELS_CONFIG = "DEFAULT_LABELS"
LABELS_SNAKE_CASE_CONFIG = "LABELS_SNAKE_CASE"
EXPORTED_TAGS_ON_METRICS_CONFIG = "EXPORTED_TAGS_ON_METRICS"
FIREHOSE_OUTPUT_MODE_CONFIG = "FIREHOSE_OUTPUT_MODE"
YACE_COMPAT_MODE_CONFIG = "YACE_COMPAT_MODE"
YACE_COMPAT_STATS_CONFIG = "YACE_COMPAT_STATS"
OTEL_EXPORTER_OTLP_ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"
OTEL_EXPORTER_OTLP_TIMEOUT = "OTEL_EXPORTER_OTLP_TIMEOUT"
OTEL_EXPORTER_OTLP_HEADERS = "OTEL_EXPORTER_OTLP_HEADERS"
OTEL_EXPORTER_OTLP_INSECURE = "OTEL_EXPORTER_OTLP_INSECURE"
OTEL_EXPORTER_OTLP_PROTOCOL = "OTEL_EXPORTER_OTLP_PROTOCOL"

OUTPUT_MODE_PASS_THROUGH = "pass_through"
OUTPUT_MODE_ENHANCED = "enhanced"

PROTOCOL_GRPC = "grpc"
PROTOCOL_HTTP_PROTOBUF = "http/protobuf"

DEFAULT_FILE_CACHE_EXPIRATION = datetime.timedelta(hours=1)
DEFAULT_FILE_CACHE_PATH = "/tmp"
DEFAULT_EXPORT_TIMEOUT = datetime.timedelta(seconds=5)

_DURATION_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": datetime.timedelta(microseconds=0.001),
    "us": datetime.timedelta(microseconds=1),
    "µs": datetime.timedelta(microseconds=1),
    "ms": datetime.timedelta(milliseconds=1),
    "s": datetime.timedelta(seconds=1),
    "m": datetime.timedelta(minutes=1),
    "h": datetime.timedelta(hours=1),
}


def parse_duration(value: str) -> datetime.timedelta:
    """Parse a Go-style duration such as "1h", "90s" or "1h30m"."""
    text = value.strip()
    negative = text.startswith("-")
    if text[:1] in ("+", "-"):
        text = text[1:]
    if text == "0":
        return datetime.timedelta(0)

    total = datetime.timedelta(0)
    position = 0
    while position < len(text):
        match = _DURATION_COMPONENT.match(text, position)
        if match is None:
            raise ConfigurationError(f"invalid duration {value!r}")
        total += _DURATION_UNITS[match.group(2)] * float(match.group(1))
        position = match.end()
    if position == 0:
        raise ConfigurationError(f"invalid duration {value!r}")
    return -total if negative else total


def _parse_string_list(value: str, name: str) -> List[str]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{name} is not valid JSON: {exc}") from exc
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ConfigurationError(f"{name} must be a JSON array of strings")
    return parsed


def parse_static_labels(value: Optional[str]) -> Dict[str, str]:
    """Parse a JSON array of "key=value" strings, e.g. '["env=prod","team=platform"]'."""
    if not value:
        return {}
    static_labels = {}
    for label in _parse_string_list(value, STATIC_LABELS_CONFIG):
        if not label:
            raise ConfigurationError(f"{STATIC_LABELS_CONFIG} contains empty string")
        if "=" not in label:
            raise ConfigurationError(f"{STATIC_LABELS_CONFIG} contains string that is not a key=value pair")
        key, label_value = label.split("=", 1)
        static_labels[key] = label_value
    return static_labels


def parse_exported_tags(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return _parse_string_list(value, EXPORTED_TAGS_ON_METRICS_CONFIG)


def parse_statistics(value: Optional[str]) -> FrozenSet[str]:
    """Parse the statistics to expand summaries into; an empty value or array enables the default statistics."""
    if not value:
        return frozenset(DEFAULT_STATISTICS)
    statistics = _parse_string_list(value, YACE_COMPAT_STATS_CONFIG)
    return frozenset(statistics) if statistics else frozenset(DEFAULT_STATISTICS)


def parse_headers(value: Optional[str]) -> Dict[str, str]:
    headers = {}
    for pair in (value or "").split(","):
        if "=" in pair:
            key, header_value = pair.split("=", 1)
            if key.strip():
                headers[key.strip()] = header_value.strip()
    return headers


def _env_bool(key: str, default: bool) -> bool:
    value = os.environ.get(key, "").strip().lower()
    if not value:
        return default
    return value == "true"


def _env_string(key: str, default: Optional[str]) -> Optional[str]:
    return os.environ.get(key) or default


def _env_duration(key: str, default: datetime.timedelta) -> datetime.timedelta:
    value = os.environ.get(key)
    if not value:
        return default
    try:
        return parse_duration(value)
    except ConfigurationError as exc:
        _logger.warning("Failed to parse duration value of %s, using default %s: %s", key, default, exc)
        return default


class EnricherConfig:
    def __init__(
        self,
        region: Optional[str] = None,
        continue_on_resource_failure: bool = True,
        continue_on_export_failure: bool = True,
        file_cache_enabled: bool = True,
        file_cache_expiration: datetime.timedelta = DEFAULT_FILE_CACHE_EXPIRATION,
        file_cache_path: str = DEFAULT_FILE_CACHE_PATH,
        static_labels: Optional[Dict[str, str]] = None,
        default_labels: bool = False,
        labels_snake_case: bool = True,
        exported_tags: Optional[List[str]] = None,
        output_mode: str = OUTPUT_MODE_PASS_THROUGH,
        yace_compat_mode: bool = False,
        yace_compat_stats: Optional[FrozenSet[str]] = None,
        otlp_endpoint: Optional[str] = None,
        otlp_timeout: datetime.timedelta = DEFAULT_EXPORT_TIMEOUT,
        otlp_headers: Optional[Dict[str, str]] = None,
        otlp_insecure: bool = True,
        otlp_protocol: str = PROTOCOL_GRPC,
    ):
        self.region = region
        self.continue_on_resource_failure = continue_on_resource_failure
        self.continue_on_export_failure = continue_on_export_failure
        self.file_cache_enabled = file_cache_enabled
        self.file_cache_expiration = file_cache_expiration
        self.file_cache_path = file_cache_path
        self.static_labels = static_labels or {}
        self.default_labels = default_labels
        self.labels_snake_case = labels_snake_case
        self.exported_tags = exported_tags or []
        self.output_mode = output_mode
        self.yace_compat_mode = yace_compat_mode
        self.yace_compat_stats = yace_compat_stats if yace_compat_stats is not None else frozenset(DEFAULT_STATISTICS)
        self.otlp_endpoint = otlp_endpoint
        self.otlp_timeout = otlp_timeout
        self.otlp_headers = otlp_headers or {}
        self.otlp_insecure = otlp_insecure
        self.otlp_protocol = otlp_protocol

    @classmethod
    def from_env(cls) -> "EnricherConfig":
        try:
            static_labels = parse_static_labels(os.environ.get(STATIC_LABELS_CONFIG))
        except ConfigurationError as exc:
            _logger.warning("Failed to parse %s: %s", STATIC_LABELS_CONFIG, exc)
            static_labels = {}

        try:
            exported_tags = parse_exported_tags(os.environ.get(EXPORTED_TAGS_ON_METRICS_CONFIG))
        except ConfigurationError as exc:
            _logger.warning("Failed to parse %s: %s", EXPORTED_TAGS_ON_METRICS_CONFIG, exc)
            exported_tags = []

        try:
            yace_compat_stats = parse_statistics(os.environ.get(YACE_COMPAT_STATS_CONFIG))
        except ConfigurationError as exc:
            _logger.warning("Failed to parse %s: %s", YACE_COMPAT_STATS_CONFIG, exc)
            yace_compat_stats = frozenset(DEFAULT_STATISTICS)

        output_mode = _env_string(FIREHOSE_OUTPUT_MODE_CONFIG, OUTPUT_MODE_PASS_THROUGH).strip().lower()
        if output_mode not in (OUTPUT_MODE_PASS_THROUGH, OUTPUT_MODE_ENHANCED):
            _logger.warning(
                "Unknown %s %s, using %s", FIREHOSE_OUTPUT_MODE_CONFIG, output_mode, OUTPUT_MODE_PASS_THROUGH
            )
            output_mode = OUTPUT_MODE_PASS_THROUGH

        otlp_protocol = _env_string(OTEL_EXPORTER_OTLP_PROTOCOL, PROTOCOL_GRPC).strip().lower()
        if otlp_protocol not in (PROTOCOL_GRPC, PROTOCOL_HTTP_PROTOBUF):
            _logger.warning("Unknown %s %s, using %s", OTEL_EXPORTER_OTLP_PROTOCOL, otlp_protocol, PROTOCOL_GRPC)
            otlp_protocol = PROTOCOL_GRPC

        return cls(
            region=_env_string(AWS_REGION_CONFIG, None),
            continue_on_resource_failure=_env_bool(CONTINUE_ON_RESOURCE_FAILURE_CONFIG, True),
            continue_on_export_failure=_env_bool(CONTINUE_ON_EXPORT_FAILURE_CONFIG, True),
            file_cache_enabled=_env_bool(FILE_CACHE_ENABLED_CONFIG, True),
            file_cache_expiration=_env_duration(FILE_CACHE_EXPIRATION_CONFIG, DEFAULT_FILE_CACHE_EXPIRATION),
            file_cache_path=_env_string(FILE_CACHE_PATH_CONFIG, DEFAULT_FILE_CACHE_PATH),
            static_labels=static_labels,
            default_labels=_env_bool(DEFAULT_LABELS_CONFIG, False),
            labels_snake_case=_env_bool(LABELS_SNAKE_CASE_CONFIG, True),
            exported_tags=exported_tags,
            output_mode=output_mode,
            yace_compat_mode=_env_bool(YACE_COMPAT_MODE_CONFIG, False),
            yace_compat_stats=yace_compat_stats,
            otlp_endpoint=_env_string(OTEL_EXPORTER_OTLP_ENDPOINT, None),
            otlp_timeout=_env_duration(OTEL_EXPORTER_OTLP_TIMEOUT, DEFAULT_EXPORT_TIMEOUT),
            otlp_headers=parse_headers(os.environ.get(OTEL_EXPORTER_OTLP_HEADERS)),
            otlp_insecure=_env_bool(OTEL_EXPORTER_OTLP_INSECURE, True),
            otlp_protocol=otlp_protocol,
        )

    def __repr__(self) -> str:
        return (
            f"EnricherConfig(region={self.region}, yace_compat_mode={self.yace_compat_mode}, "
            f"output_mode={self.output_mode}, file_cache_enabled={self.file_cache_enabled}, "
            f"otlp_protocol={self.otlp_protocol})"
        )
