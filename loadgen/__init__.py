"""
loadgen – periodic request load generator with rolling success/error/latency
statistics.

Entry points
------------
* :class:`loadgen.scheduler.LoadGenerator` – start/stop request loop.
* :mod:`loadgen.api` – FastAPI dashboard exposing state and controls.
* :mod:`loadgen.cli` – ``loadgen`` command line (Typer).
"""

__version__ = "0.1.0"
