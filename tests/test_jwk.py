import json

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from cvmattest.b64 import binary_to_base64, binary_to_base64url
from cvmattest.errors import AttestationError, ErrorCode
from cvmattest.jwk import (
    RsaHashAlg,
    RsaScheme,
    convert_jwk_to_rsa_pubkey,
    encrypt_data_with_rsa_pubkey,
    extract_jwk_info,
    parse_url,
)


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def public_pem(private_key):
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    )


def _jwk(private_key):
    numbers = private_key.public_key().public_numbers()
    n = binary_to_base64url(numbers.n.to_bytes(256, "big"))
    e = binary_to_base64url(numbers.e.to_bytes(3, "big"))
    return n, e


def _jwt(claims):
    payload = binary_to_base64(json.dumps(claims).encode("utf-8"))
    return f"header.{payload}.signature"


def test_extract_jwk_info():
    claims = {"x-ms-runtime": {"keys": [{"n": "modulus", "e": "AQAB"}, {"n": "other"}]}}
    assert extract_jwk_info(_jwt(claims)) == ("modulus", "AQAB")


def test_extract_jwk_info_missing_claims_gives_empty():
    assert extract_jwk_info(_jwt({"iss": "issuer"})) == ("", "")


def test_extract_jwk_info_empty():
    with pytest.raises(ValueError):
        extract_jwk_info("")


def test_extract_jwk_info_too_few_parts():
    with pytest.raises(ValueError):
        extract_jwk_info("a.b")


def test_extract_jwk_info_bad_json():
    payload = binary_to_base64(b"not json")
    with pytest.raises(ValueError):
        extract_jwk_info(f"h.{payload}.s")


def test_convert_jwk_round_trip(private_key):
    n, e = _jwk(private_key)
    pem = convert_jwk_to_rsa_pubkey(n, e)
    assert pem.startswith(b"-----BEGIN PUBLIC KEY-----")
    loaded = serialization.load_pem_public_key(pem)
    assert loaded.public_numbers() == private_key.public_key().public_numbers()


@pytest.mark.parametrize("n, e", [("", "AQAB"), ("AQAB", "")])
def test_convert_jwk_empty(n, e):
    with pytest.raises(AttestationError) as info:
        convert_jwk_to_rsa_pubkey(n, e)
    assert info.value.code is ErrorCode.ERROR_INVALID_INPUT_PARAMETER


def test_convert_jwk_invalid_chars():
    with pytest.raises(AttestationError) as info:
        convert_jwk_to_rsa_pubkey("!!!!", "AQAB")
    assert info.value.code is ErrorCode.ERROR_CONVERTING_JWK_TO_RSA_PUB


@pytest.mark.parametrize("hash_alg", list(RsaHashAlg))
def test_encrypt_oaep_round_trip(private_key, public_pem, hash_alg):
    data = b"symmetric key bytes"
    cipher = encrypt_data_with_rsa_pubkey(public_pem, RsaScheme.OAEP, hash_alg, data)
    algo = {
        RsaHashAlg.SHA1: hashes.SHA1,
        RsaHashAlg.SHA256: hashes.SHA256,
        RsaHashAlg.SHA384: hashes.SHA384,
        RsaHashAlg.SHA512: hashes.SHA512,
    }[hash_alg]
    plain = private_key.decrypt(
        cipher, padding.OAEP(mgf=padding.MGF1(algo()), algorithm=algo(), label=None)
    )
    assert plain == data


def test_encrypt_pkcs1_round_trip(private_key, public_pem):
    data = b"wrapped"
    cipher = encrypt_data_with_rsa_pubkey(public_pem.decode("ascii"), RsaScheme.ES, RsaHashAlg.SHA1, data)
    assert len(cipher) == 256
    assert private_key.decrypt(cipher, padding.PKCS1v15()) == data


def test_encrypt_no_padding_round_trip(private_key, public_pem):
    data = b"\x00" + bytes(range(1, 256))
    cipher = encrypt_data_with_rsa_pubkey(public_pem, RsaScheme.NULL, RsaHashAlg.SHA1, data)
    numbers = private_key.private_numbers()
    n = numbers.public_numbers.n
    plain = pow(int.from_bytes(cipher, "big"), numbers.d, n).to_bytes(256, "big")
    assert plain == data


def test_encrypt_no_padding_wrong_length(public_pem):
    with pytest.raises(AttestationError) as info:
        encrypt_data_with_rsa_pubkey(public_pem, RsaScheme.NULL, RsaHashAlg.SHA1, b"short")
    assert info.value.code is ErrorCode.ERROR_EVP_PKEY_ENCRYPT_FAILED


def test_encrypt_data_too_long(public_pem):
    with pytest.raises(AttestationError) as info:
        encrypt_data_with_rsa_pubkey(public_pem, RsaScheme.ES, RsaHashAlg.SHA1, b"x" * 300)
    assert info.value.code is ErrorCode.ERROR_EVP_PKEY_ENCRYPT_FAILED


def test_encrypt_empty_input(public_pem):
    with pytest.raises(AttestationError) as info:
        encrypt_data_with_rsa_pubkey(public_pem, RsaScheme.ES, RsaHashAlg.SHA1, b"")
    assert info.value.code is ErrorCode.ERROR_INVALID_INPUT_PARAMETER


def test_encrypt_bad_key():
    with pytest.raises(AttestationError) as info:
        encrypt_data_with_rsa_pubkey(b"not a key", RsaScheme.ES, RsaHashAlg.SHA1, b"data")
    assert info.value.code is ErrorCode.ERROR_EVP_PKEY_ENCRYPT_INIT_FAILED


def test_encrypt_unknown_hash(public_pem):
    with pytest.raises(AttestationError) as info:
        encrypt_data_with_rsa_pubkey(public_pem, RsaScheme.OAEP, "md5", b"data")
    assert info.value.code is ErrorCode.ERROR_EVP_PKEY_ENCRYPT_INIT_FAILED


def test_encrypt_with_converted_key(private_key):
    pem = convert_jwk_to_rsa_pubkey(*_jwk(private_key))
    cipher = encrypt_data_with_rsa_pubkey(pem, RsaScheme.ES, RsaHashAlg.SHA256, b"abc")
    assert private_key.decrypt(cipher, padding.PKCS1v15()) == b"abc"


@pytest.mark.parametrize(
    "url, domain",
    [
        ("https://attest.example.com/attest/AzureGuest?api-version=2020", "attest.example.com"),
        ("http://localhost:8080/path?x=1", "localhost"),
        ("  example.com  ", "example.com"),
        ("example.com:443", "example.com"),
    ],
)
def test_parse_url(url, domain):
    assert parse_url(url) == domain


def test_parse_url_empty():
    with pytest.raises(AttestationError) as info:
        parse_url("")
    assert info.value.code is ErrorCode.ERROR_INVALID_INPUT_PARAMETER


@pytest.mark.parametrize("url", ["https://", "http://:8080/path"])
def test_parse_url_no_domain(url):
    with pytest.raises(AttestationError) as info:
        parse_url(url)
    assert info.value.code is ErrorCode.ERROR_PARSING_DNS_INFO