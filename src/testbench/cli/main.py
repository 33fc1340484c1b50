"""`testbench` console script."""

import os
import sys
from collections.abc import Sequence
from pathlib import Path

from testbench.config.loader import load_config
from testbench.config.schemas import TestbenchConfig
from testbench.console.commander import Commander
from testbench.core.error_handler import safe_entrypoint
from testbench.utils.logging import level_from_name, setup_logging


@safe_entrypoint("cli.main")
def read_config(working_path: Path) -> TestbenchConfig:
    return load_config(working_path)


def main(argv: Sequence[str] | None = None) -> None:
    setup_logging(level=level_from_name(os.environ.get("TESTBENCH_LOG_LEVEL")))

    working_path = Path(os.environ.get("TESTBENCH_WORKING_PATH") or Path.cwd())
    config = read_config(working_path)
    if config is None:
        sys.exit(1)

    Commander(config, working_path).handle(argv)


if __name__ == "__main__":
    main()
