"""Wire codec: query parameter encoding, response decoding, NDJSON framing."""

from ipfs_cluster_client.codec.params import (
    encode_add_params,
    encode_metadata,
    encode_pin_options,
    encode_status_params,
    format_timestamp,
)
from ipfs_cluster_client.codec.decode import (
    decode_add_result,
    decode_cluster_info,
    decode_metric_names,
    decode_pin_info,
    decode_pin_response,
    decode_status,
    decode_version,
    parse_timestamp,
    unwrap_cid,
)
from ipfs_cluster_client.codec.ndjson import LineDecoder, aiter_records, parse_records

__all__ = [
    "encode_add_params", "encode_metadata", "encode_pin_options",
    "encode_status_params", "format_timestamp",
    "decode_add_result", "decode_cluster_info", "decode_metric_names",
    "decode_pin_info", "decode_pin_response", "decode_status", "decode_version",
    "parse_timestamp", "unwrap_cid",
    "LineDecoder", "aiter_records", "parse_records",
]
