"""Entry point for ``python -m devsweep``."""

from devsweep.cli import main

if __name__ == "__main__":
    main()
