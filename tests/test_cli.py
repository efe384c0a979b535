"""Tests for the command-line front end."""

import io
import os
import subprocess
import sys
from pathlib import Path

import pytest

from py_msws.cli import main as cli
from py_msws.cli.main import format_value, main, write_bytes, write_values
from py_msws.core import MswsPRNG

ROOT = Path(__file__).resolve().parent.parent


class BrokenStream:
    """Output sink that stops accepting data after a few writes."""

    def __init__(self, accept=2):
        self.accept = accept
        self.writes = 0

    def write(self, data):
        if self.writes >= self.accept:
            raise BrokenPipeError
        self.writes += 1
        return len(data)

    def flush(self):
        pass


class TestFormatting:
    """Test value formatting."""

    def test_hex_widths(self):
        assert format_value(0x1F, wide=False, hex_format=True) == "0000001F"
        assert format_value(0x1F, wide=True, hex_format=True) == "000000000000001F"

    def test_decimal_widths(self):
        assert format_value(42, wide=False, hex_format=False) == "00000042"
        assert format_value(0xFFFFFFFF, wide=False, hex_format=False) == "4294967295"
        assert format_value(42, wide=True, hex_format=False) == "0000000000000042"


class TestTextOutput:
    """Test numeric output modes."""

    def test_uint32_hex(self, capsys):
        assert main(["3", "0"]) == 0
        assert capsys.readouterr().out == "78A11518\n6404DE10\n6BC3A361\n"

    def test_uint32_decimal(self, capsys):
        assert main(["--decfmt", "3", "0"]) == 0
        assert capsys.readouterr().out.split() == ["2023822616", "1678040592", "1807983457"]

    def test_uint64_hex(self, capsys):
        assert main(["--uint64", "2", "0"]) == 0
        assert capsys.readouterr().out == "78A115186404DE10\n6BC3A3614D853EF1\n"

    def test_uint64_decimal(self, capsys):
        assert main(["--uint64", "--decfmt", "2", "0"]) == 0
        out = capsys.readouterr().out
        assert out.split() == ["8692251950303206928", "7765229820824600305"]

    def test_random_seed_when_omitted(self, capsys, monkeypatch):
        monkeypatch.setattr(cli, "make_seed", lambda: 42)
        assert main(["1"]) == 0
        assert capsys.readouterr().out == "7B07DE86\n"

    def test_broken_pipe_propagates_from_writer(self):
        stream = BrokenStream(accept=2)
        with pytest.raises(BrokenPipeError):
            write_values(MswsPRNG(0), stream, 0, wide=False, hex_format=True)
        assert stream.writes == 2


class TestBinaryOutput:
    """Test raw byte output."""

    @pytest.mark.skipif(sys.byteorder != "little", reason="little-endian reference bytes")
    def test_reference_bytes(self, capsysbinary):
        assert main(["--binary", "10", "0"]) == 0
        assert capsysbinary.readouterr().out.hex() == "1815a17810de046461a3"

    def test_chunked_output_matches_single_fill(self, capsysbinary, monkeypatch):
        monkeypatch.setattr(cli.settings, "chunk_size", 4)
        assert main(["--binary", "10", "99"]) == 0
        assert capsysbinary.readouterr().out == MswsPRNG(99).bytes(10)

    def test_exact_count(self):
        out = io.BytesIO()
        write_bytes(MswsPRNG(3), out, 10000, chunk_size=4096)
        assert len(out.getvalue()) == 10000

    def test_closed_sink_stops(self):
        stream = BrokenStream(accept=3)
        with pytest.raises(BrokenPipeError):
            write_bytes(MswsPRNG(3), stream, 0, chunk_size=16)
        assert stream.writes == 3


class TestArguments:
    """Test argument validation."""

    @pytest.mark.parametrize("argv", [
        ["--bogus"],
        ["abc"],
        ["-1"],
        ["5", "4294967296"],
        ["5", "seed"],
        ["--binary", "--uint64", "5"],
    ])
    def test_bad_arguments_exit_nonzero(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(argv)
        assert excinfo.value.code != 0
        assert capsys.readouterr().err

    def test_help(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--help"])
        assert excinfo.value.code == 0
        out = capsys.readouterr().out
        assert "Middle Square Weyl Sequence" in out
        assert "--binary" in out


class TestProcess:
    """Run the CLI as a real process."""

    def run_cli(self, *args, **kwargs):
        env = dict(os.environ, PYTHONPATH=str(ROOT))
        return subprocess.Popen(
            [sys.executable, "-m", "py_msws", *args],
            cwd=ROOT, env=env, stdout=subprocess.PIPE, stderr=subprocess.PIPE, **kwargs
        )

    def test_closed_pipe_is_silent(self):
        proc = self.run_cli("--binary")
        data = proc.stdout.read(8192)
        proc.stdout.close()
        _, err = proc.communicate(timeout=60)
        assert len(data) == 8192
        assert proc.returncode == 0
        assert b"Traceback" not in err

    def test_closed_pipe_in_text_mode(self):
        proc = self.run_cli("--uint64")
        lines = [proc.stdout.readline() for _ in range(2)]
        proc.stdout.close()
        _, err = proc.communicate(timeout=60)
        assert all(len(line) == 17 for line in lines)
        assert proc.returncode == 0
        assert err == b""

    def test_bad_argument_exit_status(self):
        proc = self.run_cli("--nope")
        _, err = proc.communicate(timeout=60)
        assert proc.returncode == 2
        assert b"--nope" in err
