"""Tests for the passgen command-line interface."""

import string

import pytest

from passgen.cli import main


def _passwords(out: str) -> list[str]:
    return [line.split()[0] for line in out.splitlines() if line.strip()]


class TestGenerateCommand:
    def test_count_and_length(self, capsys):
        assert main(["generate", "-n", "16", "-c", "3"]) == 0
        pwds = _passwords(capsys.readouterr().out)
        assert len(pwds) == 3
        assert all(len(p) == 16 for p in pwds)

    def test_reports_score(self, capsys):
        main(["generate"])
        assert "/100)" in capsys.readouterr().out

    def test_class_switches(self, capsys):
        main(["generate", "-n", "20", "-c", "5", "--no-uppercase", "--no-symbols"])
        for pwd in _passwords(capsys.readouterr().out):
            assert set(pwd) <= set(string.ascii_lowercase + string.digits)

    def test_require(self, capsys):
        main(["generate", "-n", "8", "-c", "10", "--no-symbols",
              "--require", "upper=3", "--require", "digits=2"])
        for pwd in _passwords(capsys.readouterr().out):
            assert sum(c.isupper() for c in pwd) >= 3
            assert sum(c.isdigit() for c in pwd) >= 2

    def test_auto_counts(self, capsys):
        main(["generate", "-n", "8", "-c", "10", "--auto-counts", "--basic-symbols"])
        for pwd in _passwords(capsys.readouterr().out):
            assert sum(c.isupper() for c in pwd) == 2
            assert sum(c.islower() for c in pwd) == 2
            assert sum(c.isdigit() for c in pwd) == 2
            assert sum(not c.isalnum() for c in pwd) == 2

    def test_verbose_logs_to_stderr(self, capsys):
        assert main(["-v", "generate", "-n", "8", "--ensure-each"]) == 0
        captured = capsys.readouterr()
        lines = [line for line in captured.out.splitlines() if line.strip()]
        assert len(lines) == 1
        assert "DEBUG" not in captured.out
        pwd = _passwords(captured.out)[0]
        assert len(pwd) == 8
        assert "DEBUG" in captured.err
        assert "Guaranteed" in captured.err
        assert pwd not in captured.err

    def test_no_classes_is_an_error(self, capsys):
        code = main(["generate", "--no-uppercase", "--no-lowercase",
                     "--no-digits", "--no-symbols"])
        assert code == 2
        assert "at least one character type" in capsys.readouterr().err

    def test_required_overflow_is_an_error(self, capsys):
        assert main(["generate", "-n", "4", "--require", "upper=5"]) == 2
        assert "exceed password length" in capsys.readouterr().err

    def test_malformed_require(self):
        with pytest.raises(SystemExit) as exc:
            main(["generate", "--require", "upper"])
        assert exc.value.code == 2

    def test_unknown_class(self):
        with pytest.raises(SystemExit):
            main(["generate", "--require", "emoji=1"])


class TestScoreCommand:
    def test_continuous(self, capsys):
        assert main(["score", "aaaaaaaaaaaa"]) == 0
        out = capsys.readouterr().out
        assert "57/100 Medium" in out
        assert "[#####-----]" in out

    def test_discrete(self, capsys):
        main(["score", "--discrete", "Abcdefghijk1!"])
        assert "Very Strong" in capsys.readouterr().out

    def test_from_file(self, capsys, tmp_path):
        f = tmp_path / "pw.txt"
        f.write_text("aB1!\n\nabc\n")
        assert main(["score", "-f", str(f)]) == 0
        out = capsys.readouterr().out
        assert "'aB1!'" in out
        assert "'abc'" in out
        assert len(out.strip().splitlines()) == 2

    def test_crlf_file(self, capsys, tmp_path):
        f = tmp_path / "pw.txt"
        f.write_bytes(b"abc\r\naB1!\r\n")
        main(["score", "-f", str(f)])
        out = capsys.readouterr().out
        assert "\r" not in out
        # 12 + 15 + 6, no stray symbol
        assert "'abc' -- [###-------] 33/100 Weak" in out

    def test_no_passwords(self, capsys):
        assert main(["score"]) == 1
        assert "Error" in capsys.readouterr().err


class TestRebalanceCommand:
    def test_rebalance(self, capsys):
        code = main(["rebalance", "-n", "12",
                     "--counts", "upper=3", "lower=3", "digits=3", "special=3",
                     "--set", "upper=5"])
        assert code == 0
        lines = {
            line.split()[0]: line.split()[1]
            for line in capsys.readouterr().out.splitlines()
        }
        assert lines == {
            "uppercase": "5",
            "lowercase": "3",
            "digits": "2",
            "special": "2",
            "total": "12",
        }

    def test_disable(self, capsys):
        main(["rebalance", "-n", "20", "--counts", "upper=3", "lower=3",
              "digits=3", "special=5", "--set", "upper=5", "--disable", "special"])
        out = capsys.readouterr().out
        assert "(disabled)" in out
        assert "9 / 20" in out

    def test_set_disabled_class_changes_nothing(self, capsys):
        main(["rebalance", "-n", "12", "--counts", "upper=3", "lower=3",
              "digits=3", "special=3", "--set", "special=7", "--disable", "special"])
        out = capsys.readouterr().out
        special = [line for line in out.splitlines() if "special" in line][0]
        assert special.split() == ["special", "3", "(disabled)"]
        assert "9 / 12" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()
