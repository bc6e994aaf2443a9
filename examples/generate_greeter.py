from __future__ import annotations

from pathlib import Path

import kitboiler
from kitboiler.locate import default_locator


def main() -> None:
    # Generate go-kit endpoints for the Greeter service in ./greeter.
    #
    # Requirements:
    # - gofmt on PATH for formatted output (otherwise the raw source is printed)
    # - No Go toolchain is needed for package lookup with locator="module"
    #
    # The same as running, from ./greeter:
    #   kitboiler --locator module --pkg greeterendpoints example.com/greeter/api.Greeter
    module_dir = Path(__file__).parent / "greeter"
    src = kitboiler.generate(
        "example.com/greeter/api.Greeter",
        package="greeterendpoints",
        src_dir=module_dir,
        locator=default_locator("module"),
    )
    print(src)


if __name__ == "__main__":
    main()
