"""Certificate records with derived subject, domain and policy information."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from .cainfo import is_oid
from .domains import DomainSuffixes, to_unicode
from .dumpstruct import dump_str_struct
from .rawcert import CertFormatError, RawCert, unpack_param_fields
from .sqlutil import (
    to_sql_bool,
    to_sql_datetime,
    to_sql_int,
    to_sql_line,
    to_sql_string,
)

CERT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ERROR_FIELD = 12

_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _ansic(t: datetime) -> str:
    """Format like ``Mon Jan  2 15:04:05 2006``, independent of locale."""
    return (
        f"{_DAY_NAMES[t.weekday()]} {_MONTH_NAMES[t.month - 1]} {t.day:2d} "
        f"{t.hour:02d}:{t.minute:02d}:{t.second:02d} {t.year:04d}"
    )


def _parse_time(text: str) -> datetime:
    try:
        return datetime.strptime(text, CERT_TIME_FORMAT)
    except ValueError as err:
        raise CertFormatError(f"Invalid certificate time '{text}': {err}") from err


def _domain_to_unicode(name: str) -> str:
    try:
        return to_unicode(name)
    except ValueError as err:
        raise CertFormatError(str(err)) from err


def _flag_set(value: str) -> bool:
    # A flag counts as set when the field is "t" or empty.
    return "t".startswith(value)


@dataclass
class ProcessedCert(RawCert):
    """A raw certificate record plus the information computed from it."""

    issuer_name: str = ""
    subject_commonname: str = ""
    subject_commonname_2ld: str = ""
    subject_organization: str = ""
    subject_organization_unit: str = ""
    subject_location: str = ""
    subject_country_code: str = ""
    not_valid_before_time: datetime = datetime.min
    not_valid_after_time: datetime = datetime.min
    domains: list[str] = field(default_factory=list)
    domains_2ld: list[str] = field(default_factory=list)
    policies: list[str] = field(default_factory=list)
    valid: bool = False
    is_browser_valid: bool = False
    ca_signed: bool = False
    errors: list[str] = field(default_factory=list)

    def unpack_issuer(self) -> None:
        """Extract the issuer's common name."""
        self.issuer_name = unpack_param_fields(self.issuer).get("CN", "")

    def unpack_subject(self, tld_info: DomainSuffixes) -> None:
        """Extract subject fields, all domains and the unique second level domains."""
        params = unpack_param_fields(self.subject)
        self.subject_commonname = _domain_to_unicode(params.get("CN", ""))
        _, second, tld, ok = tld_info.domain_parts(self.subject_commonname)
        self.subject_commonname_2ld = f"{second}.{tld}" if ok else ""
        self.subject_organization = params.get("O", "")
        self.subject_organization_unit = params.get("OU", "")
        self.subject_location = params.get("L", "")
        self.subject_country_code = params.get("C", "")

        domains = self.unpack_alt_domains()
        if self.subject_commonname:
            domains.append(self.subject_commonname)
        self.domains = domains

        seen: dict[str, None] = {}
        for name in domains:
            _, second, tld, ok = tld_info.domain_parts(_domain_to_unicode(name))
            if ok:
                seen[f"{second}.{tld}"] = None
        self.domains_2ld = list(seen)

    def unpack_cert_policies(self) -> None:
        """Collect the policy OIDs from the certificate policies field."""
        self.policies = [
            word for word in self.x509_certificate_policies.split() if is_oid(word)
        ]

    def pack_cert_for_sql(self) -> str:
        """Render the certificate as one line for the ``certs`` table."""
        fields = [
            to_sql_int(self.certificate_id),
            to_sql_int(self.serial_number),
            to_sql_int(self.issuer_id),
            to_sql_string(self.version),
            to_sql_bool(self.is_ca),
            to_sql_bool(self.is_self_signed),
            to_sql_datetime(self.not_valid_before_time),
            to_sql_datetime(self.not_valid_after_time),
            to_sql_bool(self.is_valid),
            to_sql_string(self.openssl_validation_error),
            to_sql_bool(self.is_ubuntu_valid),
            to_sql_bool(self.is_mozilla_valid),
            to_sql_bool(self.is_windows_valid),
            to_sql_bool(self.is_apple_valid),
            to_sql_int(self.depth),
            to_sql_bool(self.is_revoked),
            to_sql_string(self.reason_revoked),
            to_sql_string(self.issuer_name),
            to_sql_string(self.subject_commonname),
            to_sql_string(self.subject_commonname_2ld),
            to_sql_string(self.subject_organization),
            to_sql_string(self.subject_organization_unit),
            to_sql_string(self.subject_location),
            to_sql_string(self.subject_country_code),
            to_sql_bool(str(self.is_browser_valid).lower()),
            to_sql_string(",".join(self.errors)),
        ]
        return to_sql_line(fields)

    def _pack_pairs(self, values: list[str]) -> list[str]:
        cert_id = to_sql_int(self.certificate_id)
        return [to_sql_line([cert_id, to_sql_string(value)]) for value in values]

    def pack_domains_for_sql(self) -> list[str]:
        """Render one ``domains`` table line per second level domain."""
        return self._pack_pairs(self.domains_2ld)

    def pack_policies_for_sql(self) -> list[str]:
        """Render one ``policies`` table line per policy OID."""
        return self._pack_pairs(self.policies)

    def dump(self) -> None:
        """Print the certificate for debugging."""
        print(
            f"Cert CN: '{self.subject_commonname}'  "
            f"Organization: '{self.subject_organization}'  "
            f"Location: {self.subject_location} ({self.subject_country_code}).  "
            f"Issued by '{self.issuer_name}'"
        )
        print(
            f"  Valid from {_ansic(self.not_valid_before_time)} "
            f"to {_ansic(self.not_valid_after_time)}."
        )
        print("  Second level domains: " + "".join(f" '{d}'" for d in self.domains_2ld))
        raw = RawCert(*(getattr(self, f.name) for f in dataclasses.fields(RawCert)))
        dump_str_struct(raw)
        print()


def unpack_cert(fields: Sequence[str], tld_info: DomainSuffixes) -> ProcessedCert:
    """Build a processed certificate from one CSV row.

    Raises CertFormatError if the row or one of its fields is malformed.
    """
    cert = ProcessedCert.from_fields(fields)
    cert.valid = _flag_set(cert.is_valid)
    cert.is_browser_valid = (
        _flag_set(cert.is_mozilla_valid)
        or _flag_set(cert.is_windows_valid)
        or _flag_set(cert.is_apple_valid)
    )
    cert.ca_signed = not _flag_set(cert.is_self_signed)
    cert.not_valid_before_time = _parse_time(cert.not_valid_before)
    cert.not_valid_after_time = _parse_time(cert.not_valid_after)
    cert.unpack_issuer()
    cert.unpack_subject(tld_info)
    cert.unpack_cert_policies()
    return cert


def set_error(fields: list[str], msg: str) -> None:
    """Record ``msg`` in the validation error column unless it already holds one."""
    if not fields[ERROR_FIELD].strip():
        fields[ERROR_FIELD] = "***ERROR*** " + msg