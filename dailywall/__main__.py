"""
__main__.py

Adds support for running dailywall as a python module ("python -m dailywall") instead of invoking
the "dailywall" command line entrypoint.
"""

from dailywall.cli import main


if __name__ == "__main__":
    main()
