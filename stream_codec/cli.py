#!/usr/bin/env python3
"""
Command line tool for the streaming codec client.

Reads data from standard input (or ``--input``), compresses or decompresses
it with the configured format and writes the result to standard output.

The ``Cli`` class does the work and takes its arguments and streams as
parameters, so it can be embedded or tested without a process. ``main()`` is
the process integration point: it wires the real standard streams, turns
SIGINT and SIGTERM into token cancellation and maps errors to the exit code.
"""

import argparse
import logging
import os
import signal
import sys
from typing import BinaryIO, List, Mapping, Optional, Sequence, TextIO

from .base_classes import DEFAULT_FORMAT
from .cancellation import CancellationToken
from .client import StreamingClient
from .codecs.registry import available_formats
from .config import DEFAULT_CONFIG_PATH, FORMAT_ENV, load_settings
from .errors import CodecError, ConfigurationError, UsageError
from .streams import copy_stream

logger = logging.getLogger(__name__)

ACTION_COMPRESS = "compress"
ACTION_DECOMPRESS = "decompress"


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser which raises instead of exiting the process"""

    def error(self, message: str) -> None:
        raise UsageError(message)


def build_parser(prog: str) -> argparse.ArgumentParser:
    """Create the argument parser of the tool."""
    parser = _ArgumentParser(
        prog=prog,
        description="Compress or decompress data from standard input",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
        epilog=f"""
Available formats: {', '.join(available_formats())} (default: {DEFAULT_FORMAT.value})

The format is taken from --format, then the {FORMAT_ENV} environment
variable, then the 'format' key of the configuration file.

Examples:
  {prog} compress < data.bin > data.bin.gz
  {prog} decompress --input=data.bin.gz
  {prog} compress --format=zstd --input=data.bin > data.bin.zst
        """
    )

    parser.add_argument('action', nargs='?', choices=(ACTION_COMPRESS, ACTION_DECOMPRESS),
                        metavar='command',
                        help=f'Action to run: {ACTION_COMPRESS} or {ACTION_DECOMPRESS}')
    parser.add_argument('--help', action='store_true',
                        help=f'Show this help message for {prog}')
    parser.add_argument('--format', default=None,
                        help='Compression format to use')
    parser.add_argument('--config', default=None,
                        help=f'Path to optional configuration file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--input', default=None,
                        help='Path to input file which should be processed')
    parser.add_argument('--verbose', action='store_true',
                        help='Log debug messages to standard error')
    return parser


class Cli:
    """Runs one action of the command line tool"""

    def __init__(self,
                 args: Sequence[str],
                 input: Optional[BinaryIO] = None,
                 output: Optional[BinaryIO] = None,
                 error_output: Optional[TextIO] = None,
                 env: Optional[Mapping[str, str]] = None):
        """
        Args:
            args: Command line, program name first (usually ``sys.argv``)
            input: Binary stream read when ``--input`` is not given
            output: Binary stream receiving the action result and help text
            error_output: Text stream receiving usage messages on errors
            env: Environment mapping, defaults to ``os.environ``
        """
        self.args: List[str] = list(args)
        self.input = input
        self.output = output
        self.error_output = error_output
        self.env = env

    def run(self, token: Optional[CancellationToken] = None) -> None:
        """
        Parse the arguments and run the requested action.

        Raises:
            CodecError: If the arguments, configuration or action fail
            OSError: If the input or output streams fail outside an action
        """
        self._validate()
        token = token or CancellationToken()

        parser = build_parser(os.path.basename(self.args[0]) or "stream-codec")
        try:
            options = parser.parse_args(self.args[1:])
        except UsageError as e:
            self._print_usage(parser)
            raise UsageError("parsing arguments", cause=e) from e

        if options.help:
            self.output.write(parser.format_help().encode("utf-8"))
            self.output.flush()
            return

        if options.action is None:
            self._print_usage(parser)
            raise UsageError("no action specified")

        self._run_action(options, token)

    def _run_action(self, options: argparse.Namespace, token: CancellationToken) -> None:
        settings = load_settings(config_path=options.config,
                                 format_override=options.format,
                                 env=self.env)

        try:
            client = StreamingClient(settings.client_config())
        except ConfigurationError as e:
            raise ConfigurationError("creating compressor client", cause=e) from e

        source = self._open_input(options.input)
        try:
            if options.action == ACTION_COMPRESS:
                result, outcome = client.compress(source, token)
            else:
                result, outcome = client.decompress(source, token)

            logger.debug(f"Running {options.action} with format {client.format!r}")

            with result:
                try:
                    copy_stream(self.output, result, token)
                    self.output.flush()
                except Exception as e:
                    raise CodecError("copying action output", cause=e) from e

            error = outcome.wait()
            if error is not None:
                raise CodecError("running action", cause=error) from error
        finally:
            if source is not self.input:
                source.close()

    def _open_input(self, path: Optional[str]) -> BinaryIO:
        if path:
            try:
                return open(path, "rb")
            except OSError as e:
                raise CodecError(f"opening input file {path!r}", cause=e) from e

        if self.input is None:
            raise UsageError("either input or input path must be defined")
        return self.input

    def _print_usage(self, parser: argparse.ArgumentParser) -> None:
        self.error_output.write(parser.format_help())
        self.error_output.flush()

    def _validate(self) -> None:
        if self.output is None:
            raise UsageError("no output defined")
        if self.error_output is None:
            raise UsageError("no error output defined")
        if not self.args:
            raise UsageError("at least one argument must be provided")


def signal_token(signals=(signal.SIGINT, signal.SIGTERM)) -> CancellationToken:
    """Create a token which is cancelled when the process receives one of ``signals``."""
    token = CancellationToken()

    def _handle_signal(signum, frame):
        name = signal.Signals(signum).name
        logger.info(f"Received {name}, cancelling")
        token.cancel(f"received {name}")

    for sig in signals:
        signal.signal(sig, _handle_signal)

    return token


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = list(sys.argv if argv is None else argv)

    logging.basicConfig(
        level=logging.DEBUG if '--verbose' in args else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    cli = Cli(
        args=args,
        input=sys.stdin.buffer,
        output=sys.stdout.buffer,
        error_output=sys.stderr,
    )

    try:
        cli.run(signal_token())
    except (CodecError, OSError) as e:
        print(f"Error running CLI: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
