from __future__ import annotations

"""Console entry: ``python app.py --port 8000 --settle-delay-ms 200``."""

import argparse
from typing import Optional, Sequence

from interface_entry.bootstrap.app import CLI_DESCRIPTION, configure_arg_parser, handle_cli


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="scene-panel", description=CLI_DESCRIPTION)
    configure_arg_parser(parser)
    handle_cli(parser.parse_args(argv))


if __name__ == "__main__":
    main()
