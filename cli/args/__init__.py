"""CLI argument builder modules.

The top-level :mod:`memreport_cli` is intentionally kept thin. Groups of flags
are registered via small "arg builder" functions housed here:

- :func:`cli.args.base.add_base_args` (logging, runner paths)
- :func:`cli.args.base.add_event_args` (which event a run simulates)
- :func:`cli.args.subcommands.add_subcommands`

This keeps :func:`memreport_cli.parse_args` from turning into a god function.
"""

from __future__ import annotations

__all__ = [
    "base",
    "subcommands",
]
