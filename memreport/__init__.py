"""memreport

Core package for the peak-memory report pipeline.

Why this exists
---------------
The runner lives under top-level packages (``pipeline``, ``tools``, ``cli``).
This package owns the pieces every one of them depends on:

* the error taxonomy (:mod:`memreport.errors`)
* IO/layout rules (:mod:`memreport.io`)

It must not import from ``pipeline``, ``tools`` or ``cli`` (prevents cycles).
"""

from __future__ import annotations

__version__ = "0.3.0"
