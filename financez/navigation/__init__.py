from financez.navigation.routes import FLOW_ROUTES, MAIN_TABS, Flow, Route
from financez.navigation.gate import (
    Navigator,
    allowed_routes,
    entry_route,
    redirect,
    resolve_flow,
)

__all__ = [
    "FLOW_ROUTES",
    "MAIN_TABS",
    "Flow",
    "Route",
    "Navigator",
    "allowed_routes",
    "entry_route",
    "redirect",
    "resolve_flow",
]
