import pytest

import dictmaths_cli
from dictmaths.core.types import ResidueRecord, WORD_MASK
from dictmaths.core.utils import parse_address, parse_residue


def run(capsys, *argv):
    code = dictmaths_cli.main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


# =============================================================================
# Argument parsing helpers
# =============================================================================

@pytest.mark.parametrize("text,expected", [
    ("0x10", 16),
    ("0X1eb91ab60", 0x1EB91AB60),
    ("  42 ", 42),
    (WORD_MASK, WORD_MASK),
])
def test_parse_address(text, expected):
    assert parse_address(text) == expected


@pytest.mark.parametrize("text", ["", "-1", "zz", str(1 << 64)])
def test_parse_address_rejects(text):
    with pytest.raises(ValueError):
        parse_address(text)


def test_parse_residue():
    assert parse_residue("5:23") == ResidueRecord(modulus=23, remainder=5)
    assert parse_residue("0x5:0x17") == ResidueRecord(modulus=23, remainder=5)
    for bad in ("5", "1:2:3", "30:23"):
        with pytest.raises(ValueError):
            parse_residue(bad)


# =============================================================================
# Commands
# =============================================================================

def test_no_command_prints_help(capsys):
    code, out, _ = run(capsys)
    assert code == 0
    assert "usage" in out.lower()


def test_run_recovers_marker(capsys):
    code, out, _ = run(capsys, "run", "--marker", "0x1eb91ab60")
    assert code == 0
    assert "Leaked address: 0x00000001eb91ab60" in out
    assert "Result: MATCH" in out


def test_run_json(capsys):
    code, out, _ = run(capsys, "run", "--marker", "0x1eb91ab60", "--json", "-w", "2")
    assert code == 0
    assert '"value": "0x00000001eb91ab60"' in out


def test_run_with_randomized_enumeration_fails(capsys):
    code, out, _ = run(capsys, "run", "--marker", "0x1eb91ab60", "--permute", "7")
    assert code == 2
    assert "[-] Only 0 of 9 table sizes reconciled" in out


def test_run_with_too_few_table_sizes(capsys, tmp_path):
    path = tmp_path / "small.yaml"
    path.write_text("moduli: [23, 41]\n", encoding="utf-8")

    code, out, _ = run(capsys, "-c", str(path), "run", "--marker", "0x1eb91ab60")
    assert code == 2
    assert "does not exceed 2**64" in out

    code, out, _ = run(capsys, "-c", str(path), "run", "--marker", "0x1eb91ab60", "--allow-partial")
    assert code == 1
    assert f"Leaked address: 0x{0x1eb91ab60 % 943:016x}" in out
    assert "Result: MISMATCH" in out


def test_diag(capsys):
    code, out, _ = run(capsys, "diag", "--marker", "0x1eb91ab60")
    assert code == 0
    assert '"appears_vulnerable": true' in out


def test_diag_with_randomized_enumeration(capsys):
    code, out, _ = run(capsys, "diag", "--marker", "0x1eb91ab60", "--permute", "7")
    assert code == 1
    assert '"bucket_order_ok": false' in out
    assert '"appears_vulnerable": false' in out


def test_key(capsys):
    code, out, _ = run(capsys, "key", "5", "23")
    assert code == 0
    assert "bucket 5 of table size 23" in out


def test_key_out_of_range(capsys):
    code, _, err = run(capsys, "key", "30", "23")
    assert code == 2
    assert "[KeySynthesisFailed]" in err


def test_container(capsys):
    code, out, _ = run(capsys, "container", "even", "23")
    assert code == 0
    assert "EVEN container, table size 23: 13 entries" in out


def test_crt(capsys):
    code, out, _ = run(capsys, "crt", "3:23", "7:41")
    assert code == 0
    assert "modulo 943 (not unique in 64 bits)" in out


def test_missing_config_file(capsys, tmp_path):
    code, _, err = run(capsys, "-c", str(tmp_path / "missing.yaml"), "run", "--marker", "1")
    assert code == 2
    assert "[ConfigLoadError]" in err


def test_bad_marker_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as exc_info:
        dictmaths_cli.main(["run", "--marker", "zz"])
    assert exc_info.value.code == 2
