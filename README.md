# certscan

`certscan` reads certificate dump CSV files from large-scale HTTPS scans.
Each record has exactly 44 fields. The tool keeps or drops each certificate
by its validity, browser acceptance, CA signing, Organization field and CA
policy class (DV/OV/EV). It can write the records it keeps to a new CSV file
and bulk-load them into MySQL tables.

## Installation

```
pip install .
```

## Reference data

Two files are loaded at start-up. If either one cannot be read, or holds no
usable entries, the command reports the problem and exits with status 1.

- A public suffix list in `effective_tld_names.dat` format. Only the entries
  between the `===BEGIN ICANN DOMAINS===` and `===END ICANN DOMAINS===`
  markers are used. Punycode labels are converted to Unicode.
  Default path: `data/effective_tld_names.dat`.
- A CSV table of certification authorities. Its columns are CA name, DV OIDs,
  OV OIDs and EV OIDs, followed by any number of free-form columns. An OID
  cell may hold several OIDs mixed with other text; only words with OID
  syntax (such as `2.23.140.1.2.2`) are taken. Default path:
  `data/catypetable.csv`.

Both default paths are relative to the current directory. Use `-tldfile` and
`-oidfile` to give other paths.

## Usage

```
certscan [flags] inputcsvfile...
```

Each flag can be written with one dash or two (`-o` or `--o`).

| Flag | Meaning |
|------|---------|
| `-v` | Verbose mode: echo the arguments and print a dump of every record |
| `-noaltname` | Accepted. It does not change which records are kept; in verbose mode, multi-domain certificates are reported when it is not given |
| `-noorg` | Keep the record even if it has no Organization (`O`) field |
| `-novalid` | Keep the record even if the certificate is not valid |
| `-nobrowservalid` | Keep the record even if no major browser (Mozilla, Windows, Apple) accepts it |
| `-nocasigned` | Keep the record even if it is self-signed |
| `-policy P` | Keep the record only if one of its policy OIDs is listed in the OID table with class `P` (`DV`, `OV` or `EV`) |
| `-o FILE` | Write the kept records to this CSV file |
| `-tldfile FILE` | Public suffix list |
| `-oidfile FILE` | CA policy OID table |
| `-user`, `-pass`, `-database` | MySQL credentials. If `-database` is given without `-user` or `-pass`, the tool prints its usage and exits with status 1 |

By default a record is kept only if all of these are true:

- it is valid;
- at least one major browser accepts it;
- it is signed by a CA;
- it has an Organization field.

A record with 44 fields that cannot be parsed (a bad date, bad `NAME=value`
syntax, a bad alternative-name entry or bad punycode) is counted as an error
and always kept. Its error message is written into the OpenSSL validation
error column, unless that column already holds text. Lines that are not
valid CSV, or that do not have 44 fields, are reported and skipped. After 100
such lines in a single file, the run stops with status 1.

Example:

```
certscan -o kept.csv -tldfile effective_tld_names.dat -oidfile catypetable.csv certs.csv
```

At the end, the tool prints how many records came in, how many were kept and
how many had errors. When any records were read, it also prints the
percentage kept.

## Database output

When `-database` is given, the tool connects with PyMySQL to the local server,
with `LOAD DATA LOCAL INFILE` enabled. It then fills these tables:

- `capolicies`, from the OID table (OID, CA name, policy class);
- `certs`, `domains` and `policies`, from the certificates that are kept.

Rows are first spooled to temporary files and then loaded in batches of up to
10,000 records.

## Library use

The modules can also be used on their own:

- `certscan.domains`: `DomainSuffixes` (`load`, `domain_parts`,
  `same_second_level_domain`, `dump`), `is_subdomain`, `reverse_domain` and
  `to_unicode`.
- `certscan.cainfo`: `CAPolicyInfo` (`load`, `get_policy`, `dump`),
  `PolicyInfo`, `is_oid`, `parse_oids` and `insert_oids`.
- `certscan.rawcert`: `RawCert.from_fields`, `RawCert.unpack_alt_domains`,
  `unpack_param_fields` and `CertFormatError`.
- `certscan.certumich`: `unpack_cert` turns one CSV row into a
  `ProcessedCert`, which has `pack_cert_for_sql`, `pack_domains_for_sql`,
  `pack_policies_for_sql` and `dump`. `set_error` marks a row with an error.
- `certscan.certdb`: `CertDB` writes certificates to the three tables.
- `certscan.sqlutil`: the field escaping helpers (`escape_sql_field`,
  `to_sql_int`, `to_sql_string`, `to_sql_bool`, `to_sql_datetime`,
  `to_sql_line`) and `SQLDataLoader`.
- `certscan.cli`: `parse_args`, `Scanner`, `format_stats` and `main`.

## What it does not do

- It does not create the MySQL tables. `capolicies`, `certs`, `domains` and
  `policies` must already exist with columns in the order the loaders write
  them.
- It does not download the public suffix list, the OID table or the scan
  data.
- It does not parse certificates themselves. It only reads the CSV dump
  format.