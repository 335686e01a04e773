"""Write processed certificates to the certs, domains and policies tables."""

from __future__ import annotations

from typing import Any

from .certumich import ProcessedCert
from .sqlutil import SQLDataLoader

RECMAX = 10000

CERT_LOAD_PARAMS = "INTO TABLE certs"
DOMAIN_LOAD_PARAMS = "INTO TABLE domains"
POLICY_LOAD_PARAMS = "INTO TABLE policies"


class CertDB:
    """Bulk writer of certificates into the database."""

    def __init__(self, connection: Any, verbose: bool = False):
        self._certs = SQLDataLoader(CERT_LOAD_PARAMS, connection, RECMAX, verbose)
        self._domains = SQLDataLoader(DOMAIN_LOAD_PARAMS, connection, RECMAX, verbose)
        self._policies = SQLDataLoader(POLICY_LOAD_PARAMS, connection, RECMAX, verbose)

    def insert_cert(self, cert: ProcessedCert) -> None:
        """Queue one certificate with its domains and policies."""
        self._certs.write(cert.pack_cert_for_sql())
        self._domains.write("".join(cert.pack_domains_for_sql()))
        self._policies.write("".join(cert.pack_policies_for_sql()))

    def disconnect(self) -> None:
        """Load everything still queued; every table is attempted even if one fails."""
        first_error: BaseException | None = None
        for loader in (self._certs, self._domains, self._policies):
            try:
                loader.close()
            except Exception as err:
                if first_error is None:
                    first_error = err
        if first_error is not None:
            raise first_error

    def __enter__(self) -> "CertDB":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()