"""Routing resolvers."""

from odm.interfaces import IRoutingResolver, RoutingContext


class DefaultRoutingResolver(IRoutingResolver):
    """Routes writes by the mapping's routing field; everything else is unrouted."""

    def resolve(self, context: RoutingContext) -> str | None:
        field = context.mapping.routing_field
        if field is None or context.document is None:
            return None
        value = context.document.get(field)
        return str(value) if value is not None else None


class StaticRoutingResolver(IRoutingResolver):
    """Routes every operation with the same value."""

    def __init__(self, routing: str | None) -> None:
        self._routing = routing

    def resolve(self, context: RoutingContext) -> str | None:
        return self._routing


def just(routing: str | None) -> StaticRoutingResolver:
    """Return a resolver that always yields `routing`."""
    return StaticRoutingResolver(routing)
