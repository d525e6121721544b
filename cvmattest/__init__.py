"""Helpers for confidential VM attestation: base64 codecs, report JSON, JWK and RSA wrapping, OS info and HTTP requests with retry."""

__version__ = "0.1.0"
__all__ = ["b64", "errors", "http", "jwk", "osinfo", "report_json"]