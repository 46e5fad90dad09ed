from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import orjson

from emlview.core.config import get_settings
from emlview.schemas.eml import ParsedEmailOut
from emlview.services.mime.parser import EmlReadError, read_eml_file

logger = logging.getLogger("emlview.cli")

FAILURE_MESSAGE = "Failed to parse the email file."


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emlview",
        description="Decode an .eml file and print it as JSON.",
    )
    parser.add_argument("path", help="path to the .eml file")
    parser.add_argument(
        "--no-headers",
        action="store_true",
        help="omit the full header map from the output",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    settings = get_settings()
    try:
        parsed = asyncio.run(read_eml_file(args.path, max_bytes=settings.MAX_EML_BYTES))
    except EmlReadError as e:
        logger.error("%s", e)
        print(FAILURE_MESSAGE, file=sys.stderr)
        return 1

    out = ParsedEmailOut.from_parsed(parsed, include_headers=not args.no_headers)
    payload = orjson.dumps(out.model_dump(by_alias=True), option=orjson.OPT_INDENT_2)
    sys.stdout.write(payload.decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
