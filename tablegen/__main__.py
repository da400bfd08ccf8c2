# File: tablegen/__main__.py
"""
TableGen - Module entry point.

Allows running the generator directly via::

    python -m tablegen --tables "ACCOUNTS;ORDERS" --pkg com.acme.model

This module simply delegates to the CLI entry point defined in ``tablegen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from tablegen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
