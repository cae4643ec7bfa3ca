"""Pure predicates deciding whether an observed event belongs to a monitor.

Matching is stateless: every event is evaluated afresh against each
rule, nothing is cached between events.

- URL rules compare the event URL with ``rule.path``.
- RPC rules only ever match POST events whose originating request
  parsed as a JSON-RPC call.  They compare the call's ``method`` and
  ``params.path``, and for responses require the reply ``id`` to
  echo the request ``id``.
- Either kind can be narrowed by an HTTP method filter, which
  applies to requests and responses alike.
"""

from __future__ import annotations

from bridge_e2e.models import monitor, traffic


def path_matches(observed: str | None, expected: str | None, partial: bool = False) -> bool:
    """Compare two paths by equality, or by containment in partial mode.

    An empty or missing value on either side never matches.
    """
    if not observed or not expected:
        return False
    if partial:
        return expected in observed
    return observed == expected


def method_allowed(http_method: str, rule: monitor.MatchRule) -> bool:
    """Apply the rule's HTTP method filter, if it has one."""
    if not rule.http_method:
        return True
    return http_method.upper() == rule.http_method.upper()


def url_matches(url: str, http_method: str, rule: monitor.MatchRule) -> bool:
    """Match a URL rule against a bare URL and method (no body needed)."""
    if rule.is_rpc:
        return False
    return method_allowed(http_method, rule) and path_matches(url, rule.path, rule.partial_match)


def rpc_matches(event: traffic.CapturedEvent, rule: monitor.MatchRule) -> bool:
    """Correlate an event with an RPC rule by method, param path and id."""
    if event.http_method.upper() != "POST":
        return False
    call = event.originating_rpc
    if call is None or call.method != rule.rpc_method:
        return False
    if rule.rpc_param_path is not None and not path_matches(
        call.param_path, rule.rpc_param_path, rule.partial_match
    ):
        return False
    if event.kind == "response":
        reply = event.rpc_envelope
        return reply is not None and reply.id == call.id
    return True


def matches(event: traffic.CapturedEvent, rule: monitor.MatchRule) -> bool:
    """Return whether *event* belongs to a monitor with *rule*."""
    if not method_allowed(event.http_method, rule):
        return False
    if rule.is_rpc:
        return rpc_matches(event, rule)
    return path_matches(event.url, rule.path, rule.partial_match)
