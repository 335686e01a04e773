import pytest

from certscan.domains import DomainSuffixes, is_subdomain, reverse_domain, to_unicode

SUFFIX_FILE = """\
// Public suffix list sample
// ===BEGIN ICANN DOMAINS===
com
uk
co.uk

xn--p1ai
// ===END ICANN DOMAINS===
// ===BEGIN PRIVATE DOMAINS===
blogspot.com
// ===END PRIVATE DOMAINS===
"""


@pytest.fixture
def suffixes(tmp_path):
    path = tmp_path / "effective_tld_names.dat"
    path.write_text(SUFFIX_FILE, encoding="utf-8")
    info = DomainSuffixes()
    info.load(str(path))
    return info


def test_tld_info_load_and_dump(suffixes, capsys):
    suffixes.dump()
    out = capsys.readouterr().out
    assert out.startswith("Domain suffixes. Loaded=true.\n")
    assert " 4 domain suffixes:\n" in out
    assert "  'uk.co'\n" in out
    assert "blogspot" not in out


def test_dump_not_loaded(capsys):
    DomainSuffixes().dump()
    assert capsys.readouterr().out == "Domain suffixes. Loaded=false.\n"


def test_domain_parts_subdomain(suffixes):
    assert suffixes.domain_parts("sub.example.com") == ("sub", "example", "com", True)


def test_domain_parts_longest_suffix(suffixes):
    assert suffixes.domain_parts("www.a.b.example.co.uk") == ("www.a.b", "example", "co.uk", True)


def test_domain_parts_second_level_only(suffixes):
    assert suffixes.domain_parts("example.com") == ("", "example", "com", True)


def test_domain_parts_bare_tld(suffixes):
    assert suffixes.domain_parts("com") == ("", "", "com", False)


def test_domain_parts_unknown(suffixes):
    assert suffixes.domain_parts("example.org") == ("", "", "", False)


def test_private_section_ignored(suffixes):
    assert suffixes.domain_parts("x.blogspot.com") == ("x", "blogspot", "com", True)


def test_punycode_suffix(suffixes):
    tld = to_unicode("xn--p1ai")
    assert suffixes.domain_parts("example." + tld) == ("", "example", tld, True)


def test_same_second_level_domain(suffixes):
    assert suffixes.same_second_level_domain("a.example.com", "b.example.com") == (True, True)
    assert suffixes.same_second_level_domain("example.com", "example.co.uk") == (False, True)
    assert suffixes.same_second_level_domain("com", "com") == (True, False)


def test_not_loaded_raises():
    with pytest.raises(RuntimeError):
        DomainSuffixes().domain_parts("example.com")


def test_empty_file_raises(tmp_path):
    path = tmp_path / "empty.dat"
    path.write_text("// nothing here\ncom\n", encoding="utf-8")
    info = DomainSuffixes()
    with pytest.raises(ValueError):
        info.load(str(path))
    with pytest.raises(RuntimeError):
        info.domain_parts("example.com")


def test_bad_punycode_raises(tmp_path):
    path = tmp_path / "bad.dat"
    path.write_text("// ===BEGIN ICANN DOMAINS===\nxn--\u00e9\n", encoding="utf-8")
    with pytest.raises(ValueError):
        DomainSuffixes().load(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        DomainSuffixes().load(str(tmp_path / "missing.dat"))


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ("example.com", "example.com", True),
        ("www.Example.com", "example.COM", True),
        ("badexample.com", "example.com", False),
        ("a.com", "www.a.com", False),
        ("", "com", False),
        ("com", "", False),
    ],
)
def test_is_subdomain(a, b, expected):
    assert is_subdomain(a, b) is expected


def test_reverse_domain():
    assert reverse_domain("a.b.c") == "c.b.a"
    assert reverse_domain(reverse_domain("www.example.co.uk")) == "www.example.co.uk"


def test_to_unicode_passes_plain_labels():
    assert to_unicode("www.example.com") == "www.example.com"