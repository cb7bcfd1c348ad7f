"""Command that checks a recorded operation log for linearizability."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from pbench.history import History


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Read the history log, print the number of anomalous reads, return an exit code."""
    parser = argparse.ArgumentParser(description="Check an operation log for linearizability.")
    parser.add_argument("-log", "--log", dest="log", default="log.csv",
                        help="operation history CSV file")
    args = parser.parse_args(argv)

    history = History()
    try:
        history.read_file(args.log)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1

    print(history.linearizable())
    return 0


if __name__ == "__main__":
    sys.exit(main())