"""Module entrypoint for ``python -m lazyfind``.

All argument parsing and runtime setup happen in ``lazyfind.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
