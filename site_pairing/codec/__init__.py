"""XML codec for site association and task documents.

Split into focused stages:
- **_decode**: safe lxml parsing and root-checked decoding into typed models
- **_encode**: typed models back into request bodies, preserving untouched members
"""

from site_pairing.codec._constants import VCLOUD_NAMESPACE
from site_pairing.codec._decode import (
    DocumentDecodeError,
    decode_association_document,
    decode_site_identity,
    decode_task,
    is_task,
    parse_xml,
)
from site_pairing.codec._encode import (
    encode_association_document,
    encode_site_identity,
    encode_site_identity_with_name,
)

__all__ = [
    "VCLOUD_NAMESPACE",
    "DocumentDecodeError",
    "decode_association_document",
    "decode_site_identity",
    "decode_task",
    "encode_association_document",
    "encode_site_identity",
    "encode_site_identity_with_name",
    "is_task",
    "parse_xml",
]
