"""
PixelFrame Command Line
=======================

Encode files into PNG images, decode them back, and inspect frame headers.

Usage:
    pixelframe encode notes.txt notes.png
    pixelframe encode - out.png --no-compress < data.bin
    pixelframe decode notes.png notes.txt
    pixelframe decode notes.png - > data.bin
    pixelframe inspect notes.png
    pixelframe serve --port 8002

Exit Codes:
    0 - success
    1 - codec or I/O error
    2 - usage error (argparse) or invalid configuration
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from pixelframe.codec import (
    CodecError,
    decode_bytes_from_image,
    encode_bytes_to_image,
    inspect_image,
)
from pixelframe.models import FrameInfo

if TYPE_CHECKING:
    from pixelframe.config import Settings


logger = logging.getLogger(__name__)


def _read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _write_output(target: str, data: bytes) -> None:
    if target == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        Path(target).write_bytes(data)


def cmd_encode(args: argparse.Namespace) -> int:
    payload = _read_input(args.input)
    use_compression = args.settings.codec.use_compression if args.compress is None else args.compress

    width, height = encode_bytes_to_image(
        payload,
        args.output,
        use_compression=use_compression,
        png_compression=args.png_compression,
    )

    print(f"Wrote {args.output} ({width}x{height}, {len(payload)} bytes)", file=sys.stderr)
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    payload = decode_bytes_from_image(args.image)
    _write_output(args.output, payload)
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    header, (width, height) = inspect_image(args.image)
    info = FrameInfo.from_header(header, width=width, height=height)
    print(info.model_dump_json(indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "pixelframe.main:app",
        host=args.host,
        port=args.port,
        log_level=args.settings.logging.level.lower(),
    )
    return 0


def build_parser(settings: "Settings") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelframe",
        description="Store arbitrary bytes losslessly inside PNG images",
    )
    parser.set_defaults(settings=settings)
    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Embed a file in a PNG")
    encode.add_argument("input", help="Input file ('-' for stdin)")
    encode.add_argument("output", help="Output PNG path")
    encode.add_argument(
        "--compress",
        action=argparse.BooleanOptionalAction,
        default=None,
        help=f"Gzip the payload (default: {settings.codec.use_compression})",
    )
    encode.add_argument(
        "--png-compression",
        type=int,
        choices=range(10),
        default=settings.codec.png_compression,
        metavar="0-9",
        help=f"PNG zlib level (default: {settings.codec.png_compression})",
    )
    encode.set_defaults(handler=cmd_encode)

    decode = subparsers.add_parser("decode", help="Recover a file from a PNG")
    decode.add_argument("image", help="Input PNG path")
    decode.add_argument("output", help="Output file ('-' for stdout)")
    decode.set_defaults(handler=cmd_decode)

    inspect = subparsers.add_parser("inspect", help="Print the frame header of a PNG")
    inspect.add_argument("image", help="Input PNG path")
    inspect.set_defaults(handler=cmd_inspect)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=settings.server.host, help="Bind host")
    serve.add_argument("--port", type=int, default=settings.server.port, help="Bind port")
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    # Invalid configuration exits with status 2, like a usage error
    try:
        from pixelframe.config import load_config

        settings = load_config()
    except ValueError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    try:
        return args.handler(args)
    except CodecError as e:
        logger.error(f"{args.command} failed: {e.kind}: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
