"""CLI: Validate a festivals.json registry before deploying it."""

import argparse
import sys
from typing import List, Optional

from festival_proxy.errors import RegistryError
from festival_proxy.repositories.festival_registry import FestivalRegistryRepository


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a festival registry file")
    parser.add_argument(
        "path",
        nargs="?",
        help="Path to festivals.json (defaults to the packaged registry)",
    )
    args = parser.parse_args(argv)

    try:
        repository = FestivalRegistryRepository.load(args.path)
    except RegistryError as e:
        print(f"✗ festival registry validation failed:\n  {e}", file=sys.stderr)
        return 1

    registry = repository.registry
    print(f"✓ {repository.source} is valid!")
    print(f"  - {len(registry.festivals)} festival(s) defined")
    default = registry.default_festival
    print(f"  - Default festival: {default.id} ({default.name})")
    print(f"  - Version: {registry.version}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
