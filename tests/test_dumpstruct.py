from dataclasses import dataclass

import pytest

from certscan.dumpstruct import dump_str_struct


@dataclass
class Record:
    first: str
    second: str
    third: str


def test_dump_format(capsys):
    dump_str_struct(Record("alpha", "beta", "gamma"))
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == " # 0: (first)  alpha"
    assert lines[2] == " # 2: (third)  gamma"


def test_dump_one_line_per_field_in_order(capsys):
    dump_str_struct(Record("x", "y", "z"))
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert [line.split("(")[1].split(")")[0] for line in lines] == ["first", "second", "third"]
    assert [line.rsplit("  ", 1)[1] for line in lines] == ["x", "y", "z"]


def test_dump_rejects_non_dataclass():
    with pytest.raises(TypeError):
        dump_str_struct({"first": "alpha"})


def test_dump_rejects_dataclass_type():
    with pytest.raises(TypeError):
        dump_str_struct(Record)