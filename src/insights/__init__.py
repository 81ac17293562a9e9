# SPDX-License-Identifier: MIT

from insights.cleanup import register_cleanup
from insights.initialize import initialize
from insights.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
