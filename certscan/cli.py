"""Command line scanner that filters certificate scan CSV files."""

from __future__ import annotations

import argparse
import contextlib
import csv
import sys
from dataclasses import dataclass, field
from typing import Any, Sequence

import pymysql

from .cainfo import CAPolicyInfo, insert_oids
from .certdb import CertDB
from .certumich import ProcessedCert, set_error, unpack_cert
from .domains import DomainSuffixes
from .rawcert import FIELD_COUNT, CertFormatError

DEFAULT_TLD_FILE = "data/effective_tld_names.dat"
DEFAULT_OID_FILE = "data/catypetable.csv"
MAX_BAD_LINES = 100


@dataclass
class Options:
    """Command line options.

    A record is dropped when it lacks one of the properties below, unless the
    matching option is set.
    """

    altname: bool = False  # keep records without alt names
    org: bool = False  # keep records without an Organization field
    valid: bool = False  # keep invalid certificates
    browservalid: bool = False  # keep certificates no major browser accepts
    casigned: bool = False  # keep self-signed certificates
    policy: str = ""  # keep only if the policy class matches ("DV", "OV", "EV")
    outfilename: str = ""
    infilenames: list[str] = field(default_factory=list)
    tldfilename: str = DEFAULT_TLD_FILE
    oidfilename: str = DEFAULT_OID_FILE
    verbose: bool = False
    user: str = ""
    password: str = ""
    database: str = ""


@dataclass
class Tallies:
    """Record counts for a run."""

    records_in: int = 0
    records_out: int = 0
    errors: int = 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certscan",
        description="Filter certificate scan CSV files into a CSV file or a database.",
        allow_abbrev=False,
    )

    def flag(name: str, dest: str, text: str) -> None:
        parser.add_argument(f"-{name}", f"--{name}", dest=dest, action="store_true", help=text)

    def option(name: str, dest: str, default: str, text: str) -> None:
        parser.add_argument(f"-{name}", f"--{name}", dest=dest, default=default, help=text)

    flag("v", "verbose", "Verbose mode")
    flag("noaltname", "altname", "Keep record if no Alt Names")
    flag("noorg", "org", "Keep record if no Organization")
    flag("novalid", "valid", "Keep record if not valid cert")
    flag("nobrowservalid", "browservalid", "Keep record if not valid per Mozilla root cert list")
    flag("nocasigned", "casigned", "Keep record if not CA-signed (self-signed cert)")
    option("policy", "policy", "", "Keep record if policy matches ('DV', 'OV', 'EV', or an OID value)")
    option("o", "outfilename", "", "Output file (csv format)")
    option("user", "user", "", "Database user name")
    option("pass", "password", "", "Database password")
    option("database", "database", "", "Database name")
    option("tldfile", "tldfilename", DEFAULT_TLD_FILE, "File of top-level domain suffixes (csv format)")
    option("oidfile", "oidfilename", DEFAULT_OID_FILE, "File of Policy OIDs by CA (csv format)")
    parser.add_argument("infilenames", nargs="*", metavar="inputcsvfile")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Options:
    """Parse the command line into an Options object."""
    ns = _build_parser().parse_args(argv)
    options = Options(
        altname=ns.altname,
        org=ns.org,
        valid=ns.valid,
        browservalid=ns.browservalid,
        casigned=ns.casigned,
        policy=ns.policy,
        outfilename=ns.outfilename,
        infilenames=list(ns.infilenames),
        tldfilename=ns.tldfilename,
        oidfilename=ns.oidfilename,
        verbose=ns.verbose,
        user=ns.user,
        password=ns.password,
        database=ns.database,
    )
    if options.verbose:
        print("Verbose mode.")
        print(f"Output file: {options.outfilename}")
        print("Input files: ")
        for name in options.infilenames:
            print(name)
    return options


def _usage(msg: str) -> None:
    print(msg, file=sys.stderr)
    print(file=sys.stderr)
    print("Usage:  certscan [flags] inputcsvfile...", file=sys.stderr)
    print(_build_parser().format_help(), file=sys.stderr)
    raise SystemExit(1)


def format_stats(tallies: Tallies) -> str:
    """Render the final record counts."""
    text = (
        f"Record counts:\n In:  {tallies.records_in:12d}\n"
        f" Out: {tallies.records_out:12d}\n Err: {tallies.errors:12d}\n"
    )
    if tallies.records_in > 0:
        pct = tallies.records_out * 100 / tallies.records_in
        text += f" {pct:1.2f}% kept.\n"
    return text


def _partial_cert(fields: Sequence[str]) -> ProcessedCert:
    if len(fields) >= FIELD_COUNT:
        return ProcessedCert.from_fields(fields)
    return ProcessedCert(*([""] * FIELD_COUNT))


class Scanner:
    """Applies the keep rules to certificate records and writes the survivors."""

    def __init__(self, options: Options, tld_info: DomainSuffixes, ca_info: CAPolicyInfo):
        self.options = options
        self.tld_info = tld_info
        self.ca_info = ca_info
        self.tallies = Tallies()

    def keep(self, cert: ProcessedCert) -> bool:
        """Decide whether a processed certificate passes the filters."""
        opts = self.options
        keep = (
            (opts.valid or cert.valid)
            and (opts.browservalid or cert.is_browser_valid)
            and (opts.casigned or cert.ca_signed)
        )
        domain = cert.subject_commonname
        if keep and opts.policy:
            found = False
            for oid in cert.policies:
                info = self.ca_info.get_policy(oid)
                if info is not None:
                    print(f"Domain '{domain}' OID {oid} ({info.policy}) from CA {info.ca_name}")
                    found = found or info.policy == opts.policy
            keep = found
        if keep and not opts.altname and len(cert.domains_2ld) > 1 and opts.verbose:
            print(
                f"Multiple-domain cert: '{cert.domains_2ld[0]}' vs '{cert.domains_2ld[1]}'"
            )
        if keep and not opts.org:
            keep = bool(cert.subject_organization)
        return keep

    def handle_record(self, fields: list[str], csv_writer: Any, db: Any) -> None:
        """Process one parsed CSV row; malformed rows are marked and kept."""
        self.tallies.records_in += 1
        try:
            cert = unpack_cert(fields, self.tld_info)
        except CertFormatError as err:
            cert = _partial_cert(fields)
            set_error(fields, f"INVALID RECORD FORMAT: {err}")
            self.tallies.errors += 1
            keep = True
        else:
            keep = self.keep(cert)
        if keep:
            self.tallies.records_out += 1
            if csv_writer is not None:
                csv_writer.writerow(fields)
            if db is not None:
                db.insert_cert(cert)
        if self.options.verbose:
            cert.dump()

    def read_input_file(self, path: str, csv_writer: Any, db: Any) -> int:
        """Process every record of one input file; return the number of bad lines.

        Raises ValueError once too many bad lines have been seen.
        """
        bad_lines = 0
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as fh:
            reader = csv.reader(fh, strict=True)
            while True:
                try:
                    fields = next(reader)
                except StopIteration:
                    return bad_lines
                except csv.Error as err:
                    problem = f"line {reader.line_num}: {err}"
                else:
                    if not fields:
                        continue
                    if len(fields) == FIELD_COUNT:
                        self.handle_record(fields, csv_writer, db)
                        continue
                    problem = f"record on line {reader.line_num}: wrong number of fields"
                print("Rejected CSV line: ", problem)
                bad_lines += 1
                if bad_lines >= MAX_BAD_LINES:
                    raise ValueError(f"Too many bad CSV lines in {path}: {problem}")

    def process_files(self, connection: Any) -> None:
        """Process all input files into the output CSV file and/or the database."""
        opts = self.options
        with contextlib.ExitStack() as stack:
            writer = None
            if opts.outfilename:
                print("Output file: ", opts.outfilename)
                out = stack.enter_context(
                    open(opts.outfilename, "w", encoding="utf-8",
                         errors="surrogateescape", newline="")
                )
                writer = csv.writer(out, lineterminator="\n")
            db = None
            if connection is not None:
                db = stack.enter_context(CertDB(connection, opts.verbose))
            for path in opts.infilenames:
                print("Input file: ", path, file=sys.stderr)
                bad_lines = self.read_input_file(path, writer, db)
                if bad_lines > 0:
                    print(bad_lines, "bad CSV lines in this file.")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the scanner from the command line."""
    options = parse_args(argv)
    try:
        tld_info = DomainSuffixes()
        tld_info.load(options.tldfilename)
        ca_info = CAPolicyInfo()
        ca_info.load(options.oidfilename)
    except (OSError, ValueError) as err:
        print(f"certscan: {err}", file=sys.stderr)
        return 1

    connection = None
    if options.database:
        if not options.user or not options.password:
            _usage("-database specified, but not -user or -pass for access.")
        connection = pymysql.connect(
            user=options.user,
            password=options.password,
            database=options.database,
            local_infile=True,
        )
        if options.verbose:
            print(f"Connected to database '{options.database}'.")

    scanner = Scanner(options, tld_info, ca_info)
    try:
        if connection is not None:
            insert_oids(connection, ca_info, options.verbose)
        if options.infilenames:
            scanner.process_files(connection)
    except (OSError, ValueError) as err:
        print(f"certscan: {err}", file=sys.stderr)
        return 1
    finally:
        if connection is not None:
            connection.close()
    print(format_stats(scanner.tallies), end="")
    return 0