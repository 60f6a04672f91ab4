"""
Onboarding Gate

The root of navigation. Exactly one flow is reachable at a time,
decided only by the synchronizer's auth state:

    loading                           -> splash
    unauthenticated                   -> welcome / login / signup
    authenticated, onboarding pending -> onboarding steps
    authenticated, onboarding done    -> main tabs

A request for a route outside the current flow is redirected to that
flow's entry route. Where the user was before a redirect is not kept.
"""

from typing import TYPE_CHECKING, Callable, Optional

import structlog

from financez.audit.logger import AuditLogger
from financez.models.audit import AuditEventBuilder
from financez.models.auth import AuthState
from financez.navigation.routes import FLOW_ROUTES, Flow, Route

if TYPE_CHECKING:
    from financez.session.manager import SessionManager


logger = structlog.get_logger(__name__)


_STATE_FLOWS = {
    AuthState.LOADING: Flow.LOADING,
    AuthState.UNAUTHENTICATED: Flow.AUTH,
    AuthState.AUTHENTICATED_INCOMPLETE_PROFILE: Flow.ONBOARDING,
    AuthState.AUTHENTICATED_COMPLETE_PROFILE: Flow.MAIN,
}


def resolve_flow(state: AuthState) -> Flow:
    return _STATE_FLOWS[state]


def allowed_routes(state: AuthState) -> tuple[Route, ...]:
    return FLOW_ROUTES[resolve_flow(state)]


def entry_route(flow: Flow, after_sign_out: bool = False) -> Route:
    """Where a flow starts. After a sign-out the auth flow opens on login."""
    if flow == Flow.AUTH and after_sign_out:
        return Route.LOGIN
    return FLOW_ROUTES[flow][0]


def redirect(state: AuthState, requested: Route, after_sign_out: bool = False) -> Route:
    """The route actually shown when `requested` is asked for in `state`."""
    if requested in allowed_routes(state):
        return requested
    return entry_route(resolve_flow(state), after_sign_out)


class Navigator:
    """
    Tracks the current route and re-applies the gate whenever the
    session manager reports a change.
    """

    def __init__(
        self,
        session_manager: "SessionManager",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session_manager
        self._audit = audit_logger or AuditLogger()
        self._current = Route.SPLASH
        self._flow = Flow.LOADING
        self._after_sign_out = False
        self._remove_listener: Optional[Callable[[], None]] = session_manager.on_change(
            self._reevaluate
        )
        self._reevaluate()

    @property
    def current_route(self) -> Route:
        return self._current

    @property
    def flow(self) -> Flow:
        return self._flow

    def navigate(self, route: Route) -> Route:
        """Go to a route, or to the entry of the current flow if it is gated."""
        route = Route(route)
        state = self._session.auth_state
        resolved = redirect(state, route, self._after_sign_out)
        if resolved != route:
            self._audit.log(AuditEventBuilder.navigation_redirected(
                requested=route.value,
                resolved=resolved.value,
                state=state.value,
            ))
        self._current = resolved
        return resolved

    def _reevaluate(self) -> None:
        state = self._session.auth_state
        flow = resolve_flow(state)

        if flow == Flow.AUTH and self._flow in (Flow.ONBOARDING, Flow.MAIN):
            self._after_sign_out = True
        elif flow in (Flow.ONBOARDING, Flow.MAIN):
            self._after_sign_out = False

        if flow != self._flow:
            logger.debug("flow_changed", previous=self._flow.value, flow=flow.value)
        self._flow = flow
        self._current = redirect(state, self._current, self._after_sign_out)

    def close(self) -> None:
        """Stop following the session manager."""
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
