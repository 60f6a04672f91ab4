"""Screen identifiers and the flows they belong to."""

from enum import Enum


class Route(str, Enum):
    SPLASH = "splash"
    WELCOME = "welcome"
    LOGIN = "login"
    SIGNUP = "signup"
    ONBOARDING_STEP1 = "onboarding_step1"
    ONBOARDING_STEP2 = "onboarding_step2"
    ONBOARDING_FORM = "onboarding_form"
    HOME = "home"
    GOALS = "goals"
    WALLET = "wallet"
    INVEST = "invest"
    PROFILE = "profile"


class Flow(str, Enum):
    """The navigation trees; exactly one is reachable at a time."""
    LOADING = "loading"
    AUTH = "auth"
    ONBOARDING = "onboarding"
    MAIN = "main"


FLOW_ROUTES: dict[Flow, tuple[Route, ...]] = {
    Flow.LOADING: (Route.SPLASH,),
    Flow.AUTH: (Route.WELCOME, Route.LOGIN, Route.SIGNUP),
    Flow.ONBOARDING: (Route.ONBOARDING_STEP1, Route.ONBOARDING_STEP2, Route.ONBOARDING_FORM),
    Flow.MAIN: (Route.HOME, Route.GOALS, Route.WALLET, Route.INVEST, Route.PROFILE),
}

# Tabs of the main flow, in display order
MAIN_TABS = FLOW_ROUTES[Flow.MAIN]
