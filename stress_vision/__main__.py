# FILE: stress_vision/__main__.py
# =============================================================================
# Stress Vision (SVN)
# Package Entrypoint — enables `python -m stress_vision` to launch the CLI.
#
#     python -m stress_vision --help
#     python -m stress_vision predict -c configs/engine.yaml --ndvi 0.72
#     python -m stress_vision inspect-model assets/stress_vision_v2.svsn
#
# All command wiring, logging and config resolution lives in
# `stress_vision.cli`; this module stays thin.
# =============================================================================

from __future__ import annotations

import sys


def _run() -> int:
    """
    Import and invoke the Typer CLI entrypoint.

    Returns
    -------
    int
        Process exit code (0 on success).
    """
    # Import here so the CLI-only dependencies (Typer, YAML) are not needed
    # just to import the package.
    from stress_vision.cli import main as _cli_main

    _cli_main()
    return 0


if __name__ == "__main__":
    sys.exit(_run())
