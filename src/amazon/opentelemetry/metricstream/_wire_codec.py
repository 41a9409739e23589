# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from logging import Logger, getLogger
from typing import List, Sequence

from google.protobuf.internal.decoder import _DecodeVarint32
from google.protobuf.internal.encoder import _VarintBytes
from google.protobuf.message import DecodeError

from amazon.opentelemetry.metricstream.exceptions import WireDecodeError
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import ExportMetricsServiceRequest

_logger: Logger = getLogger(__name__)

# Length prefixes are 32-bit varints
_MAX_LENGTH_PREFIX_BYTES = 5


def decode_requests(data: bytes) -> List[ExportMetricsServiceRequest]:
    """
    Decode a Metric Streams payload made of consecutive varint length-prefixed
    ExportMetricsServiceRequest messages.

    A record cut off by the end of the buffer ends the stream: the records read so far are returned.
    A malformed length prefix or a message that fails to parse raises WireDecodeError.
    """
    requests: List[ExportMetricsServiceRequest] = []
    position = 0
    end = len(data)
    while position < end:
        try:
            msg_len, msg_start = _DecodeVarint32(data, position)
        except IndexError:
            _logger.debug("Truncated length prefix at offset %s, stopping decode", position)
            break
        except DecodeError as exc:
            raise WireDecodeError(f"invalid length prefix at offset {position}: {exc}") from exc
        if msg_start - position > _MAX_LENGTH_PREFIX_BYTES:
            raise WireDecodeError(
                f"invalid length prefix at offset {position}: varint of {msg_start - position} bytes"
            )

        msg_end = msg_start + msg_len
        if msg_end > end:
            _logger.debug(
                "Truncated record at offset %s: declared %s bytes, %s available", position, msg_len, end - msg_start
            )
            break

        request = ExportMetricsServiceRequest()
        try:
            request.ParseFromString(data[msg_start:msg_end])
        except DecodeError as exc:
            raise WireDecodeError(f"invalid record at offset {position}: {exc}") from exc
        requests.append(request)
        position = msg_end
    return requests


def encode_requests(requests: Sequence[ExportMetricsServiceRequest]) -> bytes:
    """Encode requests with the same varint length-prefixed framing read by decode_requests."""
    chunks = []
    for request in requests:
        serialized = request.SerializeToString()
        chunks.append(_VarintBytes(len(serialized)))
        chunks.append(serialized)
    return b"".join(chunks)
