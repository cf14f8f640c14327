"""
Unit tests for the command line tool
====================================

Tests for stream_codec/cli.py including:
- Actions writing results to the configured output
- Format selection from flags, environment and configuration files
- Argument and runtime errors
- Exit codes of main()
"""

import gzip
import io
import signal
from unittest.mock import Mock

import pytest

from stream_codec import cli as cli_module
from stream_codec.cli import Cli, main, signal_token
from stream_codec.config import FORMAT_ENV
from stream_codec.errors import CodecError, ConfigurationError, UsageError

PROG = "stream-codec"


def make_cli(*args, data=b"", env=None, **kwargs):
    options = dict(
        args=[PROG, *args],
        input=io.BytesIO(data),
        output=io.BytesIO(),
        error_output=io.StringIO(),
        env={} if env is None else env,
    )
    options.update(kwargs)
    return Cli(**options)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test in an empty directory so no config.yaml leaks in"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestCliActions:
    """Test running actions"""

    def test_writes_result_to_output(self):
        """Test action output lands in the configured output"""
        cli = make_cli("compress", "--format=noop", data=b"plain data")
        cli.run()

        assert cli.output.getvalue() == b"plain data"

    def test_default_format_is_gzip(self):
        cli = make_cli("compress", data=b"plain data")
        cli.run()

        assert gzip.decompress(cli.output.getvalue()) == b"plain data"

    def test_decompress(self):
        cli = make_cli("decompress", data=gzip.compress(b"restored"))
        cli.run()

        assert cli.output.getvalue() == b"restored"

    def test_reads_requested_input_file(self, tmp_path):
        """Test --input takes precedence over the input stream"""
        input_file = tmp_path / "input.bin"
        input_file.write_bytes(b"from file")

        cli = make_cli("compress", "--format=noop", f"--input={input_file}", data=b"from stdin")
        cli.run()

        assert cli.output.getvalue() == b"from file"

    def test_input_stream_is_left_open(self):
        cli = make_cli("compress", "--format=noop", data=b"abc")
        cli.run()

        assert not cli.input.closed

    def test_flags_accept_separate_values(self):
        cli = make_cli("compress", "--format", "noop", data=b"abc")
        cli.run()

        assert cli.output.getvalue() == b"abc"


class TestCliFormatSelection:
    """Test where the format comes from"""

    def test_default_configuration_file(self, isolated_cwd):
        """Test config.yaml in the working directory is read"""
        (isolated_cwd / "config.yaml").write_text("format: noop\n")

        cli = make_cli("compress", data=b"abc")
        cli.run()

        assert cli.output.getvalue() == b"abc"

    def test_specified_configuration_file(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("format: noop\n")

        cli = make_cli("compress", f"--config={config_file}", data=b"abc")
        cli.run()

        assert cli.output.getvalue() == b"abc"

    def test_environment_variable(self):
        """Test COMPRESSOR_FORMAT selects the format"""
        cli = make_cli("compress", data=b"abc", env={FORMAT_ENV: "noop"})
        cli.run()

        assert cli.output.getvalue() == b"abc"

    def test_flag_wins_over_environment(self):
        """Test --format overrides COMPRESSOR_FORMAT"""
        cli = make_cli("compress", "--format=gzip", data=b"abc", env={FORMAT_ENV: "noop"})
        cli.run()

        assert cli.output.getvalue()[:2] == b"\x1f\x8b"


class TestCliHelp:
    """Test --help"""

    def test_help_returns_no_error(self):
        cli = make_cli("--help")
        cli.run()

        help_text = cli.output.getvalue().decode("utf-8")
        assert "usage:" in help_text
        assert PROG in help_text
        assert "gzip, noop, lz4, zstd" in help_text
        assert cli.error_output.getvalue() == ""


class TestCliErrors:
    """Test CLI error reporting"""

    def test_output_not_set(self):
        with pytest.raises(UsageError, match="no output defined"):
            make_cli("compress", output=None).run()

    def test_error_output_not_set(self):
        with pytest.raises(UsageError, match="no error output defined"):
            make_cli("compress", error_output=None).run()

    def test_no_arguments(self):
        with pytest.raises(UsageError, match="at least one argument must be provided"):
            make_cli(args=[]).run()

    def test_no_input(self):
        """Test neither input stream nor --input is an error"""
        with pytest.raises(UsageError, match="either input or input path must be defined"):
            make_cli("compress", input=None).run()

    def test_no_action(self):
        """Test running without an action prints usage"""
        cli = make_cli("--format=noop")

        with pytest.raises(UsageError, match="no action specified"):
            cli.run()
        assert "usage:" in cli.error_output.getvalue()

    def test_unknown_action(self):
        """Test unknown actions print the usage message only once"""
        cli = make_cli("explode")

        with pytest.raises(UsageError, match="parsing arguments"):
            cli.run()
        assert cli.error_output.getvalue().count("usage:") == 1

    def test_unknown_flag(self):
        with pytest.raises(UsageError, match="--bogus"):
            make_cli("compress", "--bogus=1").run()

    def test_multiple_actions(self):
        with pytest.raises(UsageError, match="parsing arguments"):
            make_cli("compress", "decompress").run()

    def test_unknown_format(self):
        """Test client construction errors are reported"""
        with pytest.raises(ConfigurationError, match="creating compressor client: unknown compression format 'badFormat'"):
            make_cli("compress", "--format=badFormat").run()

    def test_missing_input_file(self, tmp_path):
        with pytest.raises(CodecError, match="opening input file"):
            make_cli("compress", f"--input={tmp_path / 'missing.bin'}").run()

    def test_invalid_configuration_file(self, isolated_cwd):
        (isolated_cwd / "config.yaml").write_text("format: [unclosed\n")

        with pytest.raises(ConfigurationError, match="decoding config from file"):
            make_cli("compress").run()

    def test_action_fails(self):
        """Test action errors from the outcome are reported"""
        with pytest.raises(CodecError, match="running action: creating decompressor"):
            make_cli("decompress", data=b"foo").run()

    def test_writing_output_fails(self):
        """Test output write errors are reported"""
        output = Mock()
        output.write.side_effect = OSError("broken stdout")

        with pytest.raises(CodecError, match="copying action output: broken stdout"):
            make_cli("compress", "--format=noop", data=b"abc", output=output).run()


class TestMain:
    """Test the process entry point"""

    @pytest.fixture(autouse=True)
    def no_signal_handlers(self, monkeypatch):
        """Keep the test process' own signal handlers"""
        monkeypatch.setattr(cli_module, "signal_token", lambda: cli_module.CancellationToken())

    def _std_streams(self, monkeypatch, data=b""):
        stdin = io.TextIOWrapper(io.BytesIO(data))
        stdout = io.TextIOWrapper(io.BytesIO())
        stderr = io.StringIO()
        monkeypatch.setattr("sys.stdin", stdin)
        monkeypatch.setattr("sys.stdout", stdout)
        monkeypatch.setattr("sys.stderr", stderr)
        return stdout, stderr

    def test_exit_code_zero_on_success(self, monkeypatch):
        stdout, stderr = self._std_streams(monkeypatch, data=b"data")

        assert main([PROG, "compress", "--format=noop"]) == 0
        assert stdout.buffer.getvalue() == b"data"

    def test_exit_code_one_on_error(self, monkeypatch):
        """Test errors are printed to stderr with exit code 1"""
        _, stderr = self._std_streams(monkeypatch)

        assert main([PROG, "compress", "--format=badFormat"]) == 1
        assert "Error running CLI: creating compressor client" in stderr.getvalue()


class TestSignalToken:
    """Test signal wiring"""

    def test_signal_cancels_token(self):
        previous = signal.getsignal(signal.SIGUSR1)
        try:
            token = signal_token(signals=(signal.SIGUSR1,))
            handler = signal.getsignal(signal.SIGUSR1)

            handler(signal.SIGUSR1, None)

            assert token.cancelled
            assert token.reason == "received SIGUSR1"
        finally:
            signal.signal(signal.SIGUSR1, previous)
