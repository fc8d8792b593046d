"""Main entry point when executing sbclient as a package.

This allows running the package using python -m sbclient.
"""

from sbclient.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
