"""Command line access to object patching.

Usage:
  s3edit head plot.bin
  s3edit patch plot.bin --offset 1024 --data-file chunk.bin
  s3edit patch plot.bin --offset 1024 --fill 0x01 --length 10485760
  s3edit show plot.bin --offset 1024 --length 64

The store is configured by the JSON file named in S3_STORE_CONFIG.
"""

from __future__ import annotations

import argparse
import binascii
import logging
import sys
from pathlib import Path
from typing import Sequence

from s3edit import get_edit_service
from s3edit.common.config import ConfigLoadError, get_settings
from s3edit.common.logging import setup_logging
from s3edit.domain.segments import EditError, EditRequest
from s3edit.infra.storage.client import ByteRange, StorageError

logger = logging.getLogger("s3edit.cli")


def _parse_byte(value: str) -> int:
    number = int(value, 0)
    if not 0 <= number <= 255:
        raise argparse.ArgumentTypeError(f"byte value out of range: {value}")
    return number


def _non_negative(value: str) -> int:
    number = int(value, 0)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def _read_payload(args: argparse.Namespace) -> bytes:
    if args.data_file is not None:
        try:
            return Path(args.data_file).read_bytes()
        except OSError as exc:
            raise argparse.ArgumentTypeError(
                f"cannot read data file {args.data_file}: {exc}"
            ) from exc
    if args.hex is not None:
        # binascii.Error is a ValueError; non-ASCII input raises ValueError
        try:
            return binascii.unhexlify(args.hex)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"invalid hex payload: {exc}") from exc
    if args.length is None:
        raise argparse.ArgumentTypeError("--fill requires --length")
    return bytes([args.fill]) * args.length


def hexdump(data: bytes, start: int = 0, width: int = 16) -> str:
    lines = []
    for row in range(0, len(data), width):
        chunk = data[row : row + width]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        text = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        lines.append(f"{start + row:012x}  {hex_part:<{width * 3}} {text}")
    return "\n".join(lines)


def _cmd_head(args: argparse.Namespace) -> int:
    descriptor = get_edit_service().describe(args.key)
    print(
        f"{descriptor.bucket}/{descriptor.key} "
        f"length={descriptor.total_length} etag={descriptor.etag}"
    )
    return 0


def _cmd_patch(args: argparse.Namespace) -> int:
    payload = _read_payload(args)
    edit = EditRequest(args.offset, payload)
    length = edit.length
    descriptor = get_edit_service().modify(args.key, edit)
    print(
        f"Patched {descriptor.bucket}/{descriptor.key}: "
        f"{length} bytes at offset {args.offset}"
    )
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    if args.length == 0:
        return 0
    service = get_edit_service()
    data = service.storage.get_object_range(
        bucket=service.bucket,
        object_key=args.key,
        byte_range=ByteRange.from_half_open(args.offset, args.offset + args.length),
    )
    print(hexdump(data, start=args.offset))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3edit", description="Patch byte ranges of objects in S3-compatible stores"
    )
    parser.add_argument(
        "--plain-logs",
        action="store_true",
        help="Log as plain text instead of JSON",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    head = sub.add_parser("head", help="Show object length and ETag")
    head.add_argument("key")
    head.set_defaults(handler=_cmd_head)

    patch = sub.add_parser("patch", help="Overwrite bytes at an offset")
    patch.add_argument("key")
    patch.add_argument("--offset", type=_non_negative, required=True)
    source = patch.add_mutually_exclusive_group(required=True)
    source.add_argument("--data-file", help="File whose content is written")
    source.add_argument("--hex", help="Hex encoded bytes to write")
    source.add_argument("--fill", type=_parse_byte, help="Byte value repeated --length times")
    patch.add_argument("--length", type=_non_negative, help="Length for --fill")
    patch.set_defaults(handler=_cmd_patch)

    show = sub.add_parser("show", help="Hex dump a byte range")
    show.add_argument("key")
    show.add_argument("--offset", type=_non_negative, default=0)
    show.add_argument("--length", type=_non_negative, default=256)
    show.set_defaults(handler=_cmd_show)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = get_settings()
        setup_logging(settings.LOG_LEVEL, json_output=not args.plain_logs)
        return args.handler(args)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except (ConfigLoadError, EditError, StorageError) as exc:
        logger.debug("command failed", exc_info=exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 1


if __name__ == "__main__":
    sys.exit(main())
