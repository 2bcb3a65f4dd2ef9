"""Allow running as ``python -m donder_release``."""

from donder_release.cli.app import main

if __name__ == "__main__":
    main()
