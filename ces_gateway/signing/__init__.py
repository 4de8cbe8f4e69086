"""
AK/SK request signing components.
"""
from .models import Credential, OutboundRequest, SignedRequest, parse_query_string
from .canonical import CanonicalRequestBuilder, EMPTY_PAYLOAD_HASH
from .signature import ALGORITHM, SignatureComputer, KeyDerivation, DirectKeyDerivation
from .request_signer import RequestSigner, HEADER_DATE, DATE_FORMAT

__all__ = [
    'Credential',
    'OutboundRequest',
    'SignedRequest',
    'parse_query_string',
    'CanonicalRequestBuilder',
    'EMPTY_PAYLOAD_HASH',
    'ALGORITHM',
    'SignatureComputer',
    'KeyDerivation',
    'DirectKeyDerivation',
    'RequestSigner',
    'HEADER_DATE',
    'DATE_FORMAT',
]
