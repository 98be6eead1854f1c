"""Entry point: ``python -m infection_server``."""

import argparse

from infection_server.config.settings import HOST, LOG_LEVEL, PORT
from infection_server.main import run


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Emoji infection game server")
    parser.add_argument("--host", type=str, default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument(
        "--log-level", type=str, default=LOG_LEVEL, choices=["DEBUG", "INFO", "WARNING"]
    )
    return parser


def main() -> None:
    args = _build_parser().parse_args()
    run(host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
