"""tools/toolchain.py

Rust toolchain provisioning (the toolchain-setup collaborator).

Installs a pinned toolchain with ``rustup`` and reports the resulting
``rustc --version``. Selecting it for later steps is the caller's job (the
action exports ``RUSTUP_TOOLCHAIN`` into the job env).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from memreport.errors import BuildError

from tools.core_cmd import run_cmd, which_or_raise

logger = logging.getLogger(__name__)

RUSTUP_FALLBACKS = ["~/.cargo/bin/rustup", "/usr/local/cargo/bin/rustup"]


def install_rust_toolchain(
    toolchain: str,
    *,
    env: Dict[str, str],
    targets: Sequence[str] = (),
    components: Sequence[str] = (),
    log_path: Optional[Path] = None,
    quiet: bool = False,
) -> str:
    """Install *toolchain* (``1.74.1``, ``stable``, ``nightly-2024-01-01``...).

    Returns the ``rustc --version`` line of the installed toolchain.
    Raises :class:`BuildError` if rustup is missing or any command fails.
    """
    toolchain = str(toolchain).strip()
    if not toolchain:
        raise BuildError("toolchain version is empty")

    try:
        rustup = which_or_raise("rustup", RUSTUP_FALLBACKS, path=env.get("PATH"))
    except FileNotFoundError as e:
        raise BuildError(str(e)) from e

    cmd = [rustup, "toolchain", "install", toolchain, "--profile", "minimal", "--no-self-update"]
    for t in targets:
        cmd += ["--target", t]
    for c in components:
        cmd += ["--component", c]

    res = run_cmd(cmd, env=env, log_path=log_path, quiet=quiet)
    if not res.ok:
        raise BuildError(f"rustup failed to install {toolchain} (exit {res.exit_code})", exit_code=res.exit_code)

    ver = run_cmd([rustup, "run", toolchain, "rustc", "--version"], env=env, log_path=log_path, quiet=True)
    if not ver.ok:
        raise BuildError(f"rustc {toolchain} is not runnable (exit {ver.exit_code})", exit_code=ver.exit_code)

    line = ver.output_tail.strip().splitlines()[-1] if ver.output_tail.strip() else toolchain
    logger.info("installed toolchain %s: %s", toolchain, line)
    return line
