"""JWK extraction from attestation tokens, RSA key wrapping and URL parsing."""

from __future__ import annotations

import enum
import json
import logging
from typing import Any

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .b64 import base64_decode, base64url_to_binary
from .errors import AttestationError, ErrorCode

_log = logging.getLogger(__name__)


class RsaScheme(enum.Enum):
    """RSA padding scheme used to wrap data."""

    ES = enum.auto()
    OAEP = enum.auto()
    NULL = enum.auto()


class RsaHashAlg(enum.Enum):
    """Digest used with RSA-OAEP."""

    SHA1 = enum.auto()
    SHA256 = enum.auto()
    SHA384 = enum.auto()
    SHA512 = enum.auto()


_HASHES = {
    RsaHashAlg.SHA1: hashes.SHA1,
    RsaHashAlg.SHA256: hashes.SHA256,
    RsaHashAlg.SHA384: hashes.SHA384,
    RsaHashAlg.SHA512: hashes.SHA512,
}


def _member(value: Any, key: str) -> Any:
    if value is None:
        return None
    if isinstance(value, dict):
        return value.get(key)
    raise ValueError(f"cannot look up {key!r} in a non-object value")


def _first(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return value[0] if value else None
    raise ValueError("cannot index a non-array value")


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError("value is not convertible to a string")


def extract_jwk_info(jwt: str) -> tuple[str, str]:
    """Return the base64url (n, e) of the first runtime key in an attestation JWT.

    Missing claims give empty strings; a malformed token raises ValueError.
    """
    if not jwt:
        raise ValueError("JWT must not be empty")
    tokens = jwt.split(".")
    if len(tokens) < 3:
        raise ValueError("invalid JWT token")
    try:
        claims = json.loads(base64_decode(tokens[1]))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError("error parsing the JWT claims") from exc

    key = _first(_member(_member(claims, "x-ms-runtime"), "keys"))
    return _as_string(_member(key, "n")), _as_string(_member(key, "e"))


def convert_jwk_to_rsa_pubkey(n: str, e: str) -> bytes:
    """Build a PEM SubjectPublicKeyInfo RSA key from base64url modulus and exponent."""
    if not n or not e:
        raise AttestationError(ErrorCode.ERROR_INVALID_INPUT_PARAMETER, "Invalid input parameter")
    try:
        modulus = int.from_bytes(base64url_to_binary(n), "big")
        exponent = int.from_bytes(base64url_to_binary(e), "big")
        key = rsa.RSAPublicNumbers(exponent, modulus).public_key()
        return key.public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, TypeError) as exc:
        raise AttestationError(
            ErrorCode.ERROR_CONVERTING_JWK_TO_RSA_PUB,
            "Error while converting JWK to RSA public key",
        ) from exc


def _raw_rsa(key: rsa.RSAPublicKey, data: bytes) -> bytes:
    numbers = key.public_numbers()
    size = (key.key_size + 7) // 8
    if len(data) != size:
        raise ValueError("data length must equal the key size without padding")
    message = int.from_bytes(data, "big")
    if message >= numbers.n:
        raise ValueError("data too large for modulus")
    return pow(message, numbers.e, numbers.n).to_bytes(size, "big")


def encrypt_data_with_rsa_pubkey(
    public_key_pem: bytes | str,
    wrap_alg: RsaScheme,
    hash_alg: RsaHashAlg,
    input_data: bytes,
) -> bytes:
    """Encrypt ``input_data`` with a PEM RSA public key using the given scheme."""
    if not public_key_pem or not input_data:
        raise AttestationError(ErrorCode.ERROR_INVALID_INPUT_PARAMETER, "Invalid input parameter")

    hash_cls = _HASHES.get(hash_alg)
    if hash_cls is None:
        raise AttestationError(
            ErrorCode.ERROR_EVP_PKEY_ENCRYPT_INIT_FAILED,
            "EncryptDataWithRSAPubKey failed; called with unknown message digest algorithm",
        )
    if not isinstance(wrap_alg, RsaScheme):
        raise AttestationError(
            ErrorCode.ERROR_EVP_PKEY_ENCRYPT_INIT_FAILED,
            "EncryptDataWithRSAPubKey failed; called with unknown RSA padding algorithm",
        )

    pem = public_key_pem.encode("ascii") if isinstance(public_key_pem, str) else public_key_pem
    try:
        key = serialization.load_pem_public_key(bytes(pem))
    except (ValueError, TypeError) as exc:
        raise AttestationError(
            ErrorCode.ERROR_EVP_PKEY_ENCRYPT_INIT_FAILED, "EVP_PKEY_encrypt_init failed"
        ) from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise AttestationError(
            ErrorCode.ERROR_EVP_PKEY_ENCRYPT_INIT_FAILED, "EVP_PKEY_CTX_set_rsa_padding failed"
        )

    data = bytes(input_data)
    try:
        if wrap_alg is RsaScheme.OAEP:
            return key.encrypt(
                data,
                padding.OAEP(mgf=padding.MGF1(hash_cls()), algorithm=hash_cls(), label=None),
            )
        if wrap_alg is RsaScheme.ES:
            return key.encrypt(data, padding.PKCS1v15())
        return _raw_rsa(key, data)
    except ValueError as exc:
        raise AttestationError(
            ErrorCode.ERROR_EVP_PKEY_ENCRYPT_FAILED, "EVP_PKEY_encrypt failed"
        ) from exc


def parse_url(url: str) -> str:
    """Return the host name of a URL, without scheme, port, path or query."""
    if not url:
        raise AttestationError(ErrorCode.ERROR_INVALID_INPUT_PARAMETER, "Invalid input parameter")

    sanitized = url.strip()
    if sanitized.startswith("https://"):
        offset = 8
    elif sanitized.startswith("http://"):
        offset = 7
    else:
        offset = 0

    path_idx = sanitized.find("/", offset + 1)
    dns = sanitized[offset:] if path_idx < 0 else sanitized[offset:path_idx]
    dns = dns.partition(":")[0]
    protocol = sanitized[: offset - 3] if offset > 0 else ""

    if not dns:
        raise AttestationError(
            ErrorCode.ERROR_PARSING_DNS_INFO, "Error extracting DNS info from URL"
        )

    _log.info("Attestation URL info - protocol {%s}, domain {%s}", protocol, dns)
    return dns