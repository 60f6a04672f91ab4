from financez.screens.base import ScreenController
from financez.screens.home import HomeController, HomeView
from financez.screens.goals import (
    GOAL_CREATE_FAILED,
    GOAL_CREATED,
    NOT_SIGNED_IN,
    GoalsController,
    GoalsView,
)
from financez.screens.wallet import WalletController, WalletView
from financez.screens.invest import RECOMMENDATIONS, InvestController, InvestView, Recommendation
from financez.screens.profile import ProfileController, ProfileView

__all__ = [
    "ScreenController",
    "HomeController",
    "HomeView",
    "GOAL_CREATE_FAILED",
    "GOAL_CREATED",
    "NOT_SIGNED_IN",
    "GoalsController",
    "GoalsView",
    "WalletController",
    "WalletView",
    "RECOMMENDATIONS",
    "InvestController",
    "InvestView",
    "Recommendation",
    "ProfileController",
    "ProfileView",
]
