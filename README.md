# cvmattest

Client-side building blocks for attesting a confidential virtual machine.

## Modules

- `cvmattest.b64` – base64 conversions: `base64_to_binary`,
  `binary_to_base64`, `binary_to_base64url` (no padding),
  `base64url_to_binary`, and the text variants `base64_encode` /
  `base64_decode`. Decoding accepts missing padding, treats `=` as zero bits
  and strips trailing NUL bytes; an invalid character raises `ValueError`.
- `cvmattest.report_json` – `get_json` builds the compact attestation report
  JSON from an AIK certificate and public key, a `PcrQuote`, the PCR hash, a
  sequence of `PcrValue` and the TCG log, base64-encoding every binary field
  (`is_windows` defaults to `False`). `parse_json` decodes the payload of a
  dot-separated token, prints its claims one event per line and returns them
  parsed.
- `cvmattest.osinfo` – `get_attestation_pcr_list` (PCRs 0–7 on Unix, plus
  11–14 otherwise), `parse_os_release_file` (key/value lines of an
  `os-release` style file, quotes removed), `parse_version_string`
  (returns `(major, minor)`, minor defaulting to 0) and
  `get_windows_version`, which returns a `WindowsVersion` of
  `(10, 0, "NotApplicable")`.
- `cvmattest.jwk` – `extract_jwk_info` returns the base64url `n` and `e` of
  the first key under the `x-ms-runtime` claim of an attestation JWT;
  `convert_jwk_to_rsa_pubkey` turns them into a PEM public key;
  `encrypt_data_with_rsa_pubkey` encrypts with that key using an
  `RsaScheme` (`ES` for PKCS#1 v1.5, `OAEP`, or `NULL` for raw RSA) and an
  `RsaHashAlg` (`SHA1`, `SHA256`, `SHA384`, `SHA512`, used with OAEP);
  `parse_url` returns the host name of a URL.
- `cvmattest.http` – `send_request` POSTs a JSON payload and retries server
  errors (5xx) up to three times, waiting 5, 10 and 20 seconds.
  `HttpClient.invoke_imds_request` sends a GET or POST (`HttpVerb`) with the
  `Metadata: true` header and a 300 second timeout, retrying 404, 429 and
  5xx responses up to three times, waiting 30, 60 and 120 seconds.
  `extract_error_message` pulls `code:message` out of a JSON error body.

Failures raise `cvmattest.errors.AttestationError`, whose `code` is an
`ErrorCode` member and whose `description` explains the failure.

## Installation

```
pip install cvmattest
```

For running the tests:

```
pip install "cvmattest[test]"
pytest
```

## Example

```python
from cvmattest.jwk import (
    RsaHashAlg,
    RsaScheme,
    convert_jwk_to_rsa_pubkey,
    encrypt_data_with_rsa_pubkey,
    extract_jwk_info,
)

n, e = extract_jwk_info(jwt)          # jwt: an attestation token string
pem = convert_jwk_to_rsa_pubkey(n, e)
wrapped = encrypt_data_with_rsa_pubkey(pem, RsaScheme.OAEP, RsaHashAlg.SHA256, b"secret")
```

Sending a request to the metadata service:

```python
from cvmattest.http import HttpClient, HttpVerb

client = HttpClient()
body = client.invoke_imds_request(metadata_url, HttpVerb.GET)
```

## What this package does not do

It provides the pieces only. It does not talk to a TPM, collect TCG logs or
quotes, read isolation evidence, run a complete attestation exchange or
decrypt the returned token, and it has no command-line program.