import dataclasses

import pytest

from certscan.rawcert import FIELD_COUNT, CertFormatError, RawCert, unpack_param_fields


def _fields(**overrides):
    names = [f.name for f in dataclasses.fields(RawCert)]
    values = {name: f"v{i}" for i, name in enumerate(names)}
    values.update(overrides)
    return [values[name] for name in names]


def test_field_count_matches_record():
    fields = [str(i) for i in range(44)]
    cert = RawCert.from_fields(fields)
    assert FIELD_COUNT == 44
    assert len(dataclasses.astuple(cert)) == FIELD_COUNT
    assert cert.reason_revoked == "43"


def test_from_fields_round_trip():
    fields = _fields()
    cert = RawCert.from_fields(fields)
    assert list(dataclasses.astuple(cert)) == fields
    assert cert.certificate_id == fields[0]
    assert cert.openssl_validation_error == fields[12]
    assert cert.reason_revoked == fields[43]


def test_from_fields_ignores_extra_fields():
    fields = _fields() + ["extra"]
    cert = RawCert.from_fields(fields)
    assert list(dataclasses.astuple(cert)) == fields[:FIELD_COUNT]


def test_from_fields_too_short():
    with pytest.raises(CertFormatError, match="Not enough fields"):
        RawCert.from_fields(_fields()[:-1])


def test_alt_domains_dns_only():
    san = "DNS:a.example.com, IP Address:2001:db8::1, dns:b.example.com, email:x@example.com"
    cert = RawCert.from_fields(_fields(x509_subject_alt_name=san))
    assert cert.unpack_alt_domains() == ["a.example.com", "b.example.com"]


@pytest.mark.parametrize("san", ["", "   ", "<EMPTY>"])
def test_alt_domains_empty(san):
    cert = RawCert.from_fields(_fields(x509_subject_alt_name=san))
    assert cert.unpack_alt_domains() == []


def test_alt_domains_bad_text():
    cert = RawCert.from_fields(_fields(x509_subject_alt_name="DNS:a.example.com, junk"))
    with pytest.raises(CertFormatError, match="Unexpected text"):
        cert.unpack_alt_domains()


def test_param_fields_with_commas_in_values():
    params = unpack_param_fields("CN=www.example.com, O=Example, Inc., L=Springfield, C=US")
    assert params == {
        "CN": "www.example.com",
        "O": "Example, Inc.",
        "L": "Springfield",
        "C": "US",
    }


def test_param_fields_value_may_contain_equals():
    params = unpack_param_fields("CN=a=b")
    assert params == {"CN": "a=b"}


@pytest.mark.parametrize("text", ["", "=value", "junk, CN=x"])
def test_param_fields_invalid(text):
    with pytest.raises(CertFormatError, match="Invalid NAME=value"):
        unpack_param_fields(text)


def test_cert_format_error_is_value_error():
    with pytest.raises(ValueError):
        RawCert.from_fields([])