"""The three verification stages, each usable on its own or composed by the CLI."""

from precompile_check.stages.raw_invoke import run_raw_invocation
from precompile_check.stages.deploy import run_deployment
from precompile_check.stages.wrapper_invoke import run_wrapper_invocation

__all__ = [
    "run_raw_invocation",
    "run_deployment",
    "run_wrapper_invocation",
]
