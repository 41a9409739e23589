# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Kinesis Data Firehose transformation handler for CloudWatch Metric Streams.

Each Firehose record holds varint length-prefixed ExportMetricsServiceRequest messages. Records are
enriched, optionally exported to an OTLP collector, and returned either unchanged (pass_through) or
re-encoded with the enriched metrics (enhanced).
"""
import base64
import logging
import os
from logging import Logger, getLogger
from typing import Any, Dict, List, Optional, Union

from amazon.opentelemetry.metricstream._resource_cache import FileCacheStorage, ResourceTagCache
from amazon.opentelemetry.metricstream._tagging import TaggingApiResourceDiscovery
from amazon.opentelemetry.metricstream._wire_codec import decode_requests, encode_requests
from amazon.opentelemetry.metricstream.config import (
    LOG_LEVEL_CONFIG,
    OUTPUT_MODE_ENHANCED,
    PROTOCOL_HTTP_PROTOBUF,
    EnricherConfig,
)
from amazon.opentelemetry.metricstream.enricher import MetricStreamEnricher
from amazon.opentelemetry.metricstream.exceptions import MetricExportError, WireDecodeError
from amazon.opentelemetry.metricstream.otlp_grpc_exporter import OTLPGrpcMetricExporter
from amazon.opentelemetry.metricstream.otlp_http_exporter import OTLPHttpMetricExporter

_logger: Logger = getLogger(__name__)

_PACKAGE_LOGGER = "amazon.opentelemetry.metricstream"
_RESULT_OK = "Ok"

MetricExporter = Union[OTLPGrpcMetricExporter, OTLPHttpMetricExporter]


def configure_logging(level: Optional[str]) -> None:
    """Set the package log level: "debug" enables debug logs, anything else logs at info."""
    log_level = logging.DEBUG if (level or "").strip().lower() == "debug" else logging.INFO
    logging.basicConfig(level=log_level)
    getLogger(_PACKAGE_LOGGER).setLevel(log_level)


def _response_record(record_id: str, data: bytes) -> Dict[str, str]:
    return {
        "recordId": record_id,
        "result": _RESULT_OK,
        "data": base64.b64encode(data).decode("utf-8"),
    }


def build_enricher(config: EnricherConfig) -> MetricStreamEnricher:
    storage = FileCacheStorage(config.file_cache_path) if config.file_cache_enabled else None
    cache = ResourceTagCache(
        TaggingApiResourceDiscovery(),
        config.region,
        storage=storage,
        ttl=config.file_cache_expiration,
    )
    return MetricStreamEnricher(config, cache)


def build_exporter(config: EnricherConfig) -> Optional[MetricExporter]:
    if not config.otlp_endpoint:
        return None
    _logger.debug("OTLP %s export endpoint: %s", config.otlp_protocol, config.otlp_endpoint)
    if config.otlp_protocol == PROTOCOL_HTTP_PROTOBUF:
        return OTLPHttpMetricExporter(config.otlp_endpoint, timeout=config.otlp_timeout, headers=config.otlp_headers)
    return OTLPGrpcMetricExporter(
        config.otlp_endpoint,
        insecure=config.otlp_insecure,
        timeout=config.otlp_timeout,
        headers=config.otlp_headers,
    )


def process_records(
    records: List[Dict[str, Any]],
    config: EnricherConfig,
    enricher: MetricStreamEnricher,
    exporter: Optional[MetricExporter] = None,
) -> List[Dict[str, str]]:
    """
    Transform Firehose records into response records, in the same order.

    A record that cannot be decoded is passed through unchanged when export failures are tolerated,
    and fails the invocation otherwise. Resource discovery failures fail the invocation only when
    resource failures are not tolerated.
    """
    response_records = []
    for record in records:
        record_id = record["recordId"]
        data = base64.b64decode(record["data"])

        try:
            export_requests = decode_requests(data)
        except WireDecodeError as exc:
            _logger.error("Failed to decode record data: %s", exc)
            if not config.continue_on_export_failure:
                raise
            response_records.append(_response_record(record_id, data))
            continue

        enricher.enrich(export_requests)

        if exporter is not None:
            try:
                exporter.export(export_requests)
            except MetricExportError as exc:
                _logger.error("Failed to export OTLP metrics: %s", exc)
                if not config.continue_on_export_failure:
                    raise

        if config.output_mode == OUTPUT_MODE_ENHANCED:
            response_records.append(_response_record(record_id, encode_requests(export_requests)))
        else:
            response_records.append(_response_record(record_id, data))
    return response_records


# pylint: disable=unused-argument
def lambda_handler(event, context):
    configure_logging(os.environ.get(LOG_LEVEL_CONFIG))
    config = EnricherConfig.from_env()
    _logger.debug("Processing %s records with %s", len(event.get("records", [])), config)

    enricher = build_enricher(config)
    exporter = build_exporter(config)
    try:
        records = process_records(event.get("records", []), config, enricher, exporter)
    finally:
        if exporter is not None:
            exporter.shutdown()
    return {"records": records}
