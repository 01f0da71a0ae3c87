"""Module entrypoint for ``python -m lowlight``.

All argument parsing and runtime setup happen in ``lowlight.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
