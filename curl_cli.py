"""Command line front end: import and export requests as cURL commands."""
import argparse
import json
import logging
import sys
from pathlib import Path

from curl_transcoder import CurlParseError, RequestDescriptor, detect_shell_flavor, from_curl_command, to_curl_command
from request_snippets import build_requests_snippet, default_request_name
from transcoder_config import SHELL_CHOICES, configure_logging, load_config

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _read_text(source):
    if source is None or source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _read_request(source) -> RequestDescriptor:
    try:
        data = json.loads(_read_text(source))
    except ValueError as e:
        raise ValueError(f"Invalid request JSON: {e}") from e
    return RequestDescriptor.from_dict(data)


def _positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _resolve_shell(name: str) -> str:
    return detect_shell_flavor() if name == "auto" else name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="curl-transcoder", description="Import and export requests as cURL commands.")
    parser.add_argument("--config", type=Path, default=None, help="settings file (default: ~/.curl_transcoder_config.json)")
    parser.add_argument("--log-level", type=str.upper, default=None, choices=LOG_LEVELS)
    sub = parser.add_subparsers(dest="cmd", required=True)

    parse_p = sub.add_parser("parse", help="read a cURL command, print the request as JSON")
    parse_p.add_argument("command", nargs="?", default=None, help="cURL command (default: stdin)")
    parse_p.add_argument("--name", default=None, help="request name (default: derived from method and path)")

    gen_p = sub.add_parser("generate", help="read request JSON, print a cURL command")
    gen_p.add_argument("file", nargs="?", default=None, help="request JSON file (default: stdin)")
    gen_p.add_argument("--shell", choices=SHELL_CHOICES, default=None)

    snip_p = sub.add_parser("snippet", help="read request JSON, print a Python requests snippet")
    snip_p.add_argument("file", nargs="?", default=None, help="request JSON file (default: stdin)")
    snip_p.add_argument("--timeout", type=_positive_int, default=None)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    configure_logging(args.log_level or cfg["log_level"])

    try:
        if args.cmd == "parse":
            text = args.command if args.command is not None else _read_text(None)
            request = from_curl_command(text)
            out = {"name": args.name or default_request_name(request), **request.to_dict()}
            print(json.dumps(out, indent=2, ensure_ascii=False))
            return 0

        if args.cmd == "generate":
            shell = _resolve_shell(args.shell or cfg["shell_flavor"])
            logger.debug("generating for %s shell", shell)
            print(to_curl_command(_read_request(args.file), shell))
            return 0

        if args.cmd == "snippet":
            timeout = args.timeout if args.timeout is not None else cfg["snippet_timeout"]
            print(build_requests_snippet(_read_request(args.file), timeout=timeout))
            return 0
    except CurlParseError as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    raise AssertionError(f"unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    sys.exit(main())
