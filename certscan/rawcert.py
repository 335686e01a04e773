"""The 44 string fields of a certificate scan CSV record and field parsers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

FIELD_COUNT = 44

_T = TypeVar("_T", bound="RawCert")


class CertFormatError(ValueError):
    """A certificate record or one of its fields is malformed."""


@dataclass
class RawCert:
    """One certificate record, every field kept as the original string."""

    certificate_id: str
    hex_encoded_sha1_fingerprint: str
    serial_number: str
    issuer_id: str
    version: str
    subject: str
    issuer: str
    is_ca: str
    is_self_signed: str
    not_valid_before: str
    not_valid_after: str
    is_valid: str
    openssl_validation_error: str
    is_ubuntu_valid: str
    is_mozilla_valid: str
    is_windows_valid: str
    is_apple_valid: str
    x509_basic_constraints: str
    x509_crl_distribution_points: str
    x509_extended_key_usage_identifier: str
    x509_authority_key_identifier: str
    x509_subject_key_identifier: str
    x509_key_usage: str
    x509_certificate_policies: str
    x509_authority_info_access: str
    x509_subject_alt_name: str
    x509_ns_cert_type: str
    x509_ns_comment: str
    x509_policy_constraints: str
    x509_private_key_usage_period: str
    x509_smime_caps: str
    x509_issuer_alt_name: str
    signature_algo: str
    depth: str
    public_key_id: str
    first_seen_at: str
    public_key_type: str
    in_ubuntu_root_store: str
    in_mozilla_root_store: str
    in_windows_root_store: str
    in_apple_root_store: str
    is_revoked: str
    revoked_at: str
    reason_revoked: str

    @classmethod
    def from_fields(cls: type[_T], fields: Sequence[str]) -> _T:
        """Build a record from the first 44 fields of a CSV row."""
        if len(fields) < FIELD_COUNT:
            raise CertFormatError("Not enough fields in certificate record")
        return cls(*fields[:FIELD_COUNT])

    def unpack_alt_domains(self) -> list[str]:
        """Return the DNS entries of the subject alternative name field."""
        alt_names = self.x509_subject_alt_name.strip()
        if not alt_names or alt_names == "<EMPTY>":
            return []
        domains = []
        for pair in alt_names.split(","):
            kind, sep, value = pair.partition(":")
            if not sep:
                raise CertFormatError(
                    f"Unexpected text in alt domain field: '{alt_names}'"
                )
            if kind.strip() in ("DNS", "dns"):
                domains.append(value.strip())
        return domains


def _add_param(params: dict[str, str], field: str) -> None:
    field = field.strip()
    if not field:
        return
    key, sep, value = field.partition("=")
    if not sep or not key:
        raise CertFormatError(f"Invalid NAME=value syntax in certificate file: {field}")
    params[key.strip()] = value.strip()


def unpack_param_fields(s: str) -> dict[str, str]:
    """Parse ``NAME=value, NAME=value`` text where values may contain commas."""
    params: dict[str, str] = {}
    work = ""
    for part in s.split(","):
        if "=" in part:
            _add_param(params, work)
            work = part
        else:
            work = f"{work},{part}"
    _add_param(params, work)
    return params