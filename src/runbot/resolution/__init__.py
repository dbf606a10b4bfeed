"""Compiler resolution and run entry points for a chat front end.

The slash-command cog only manages settings. Running code is left to
whatever layer extracts code blocks and talks to a compile backend; it
calls ``run`` or ``run_implicit`` with its own ``CompileProvider``.
"""

from runbot.resolution.resolution_engine import ResolutionEngine
from runbot.resolution.run_actions import run, run_implicit

__all__ = ["ResolutionEngine", "run", "run_implicit"]
