"""Response interpretation package.

One decoder module per endpoint (route, messages, simulation,
broadcast), each a pure function from a captured response to a
small outcome record.  :mod:`interpreter` composes them.
"""

from __future__ import annotations

from bridge_e2e.responses.interpreter import ResponseHandler, interpret

__all__ = ["ResponseHandler", "interpret"]
