"""
Streamlit Frontend for FinanceZ

Renders whichever route the navigator says is reachable:
splash while the session check runs, the auth screens when signed out,
the onboarding steps until the questionnaire is saved, and the five
main tabs after that.

DESIGN PRINCIPLES:
1. Every screen reads from its controller, never from the backend
2. Every action result is shown as an alert with its title and message
3. The navigator decides the route; buttons only request one
"""

import asyncio

import streamlit as st

from financez.audit import AuditLogger
from financez.backend import BackendError
from financez.config import validate_all_settings
from financez.models.finance import GOAL_EMOJI_OPTIONS
from financez.models.forms import GoalDraft, OnboardingForm, SignInForm, SignUpForm
from financez.models.profile import FINANCIAL_GOAL_OPTIONS, RiskTolerance
from financez.models.results import ActionResult
from financez.navigation import MAIN_TABS, Route
from financez.orchestrator import AppComponents, create_app_components
from financez.screens.formatting import (
    format_balance,
    format_money,
    format_percent,
    format_signed_amount,
    time_ago,
)


st.set_page_config(
    page_title="FinanceZ",
    page_icon="💰",
    layout="centered",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


TAB_LABELS = {
    Route.HOME: "🏠 Home",
    Route.GOALS: "🎯 Goals",
    Route.WALLET: "💳 Wallet",
    Route.INVEST: "📈 Invest",
    Route.PROFILE: "👤 Profile",
}


def run_async(coro):
    """
    Run a coroutine on this browser session's event loop.

    The loop is kept for the whole session: the backend client and the
    session manager's pending tasks are bound to it.
    """
    if "event_loop" not in st.session_state:
        st.session_state.event_loop = asyncio.new_event_loop()
    loop = st.session_state.event_loop
    asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


def get_components() -> AppComponents:
    """Create the components once per browser session."""
    if "components" not in st.session_state:
        try:
            st.session_state.components = run_async(create_app_components())
        except (BackendError, ValueError) as e:
            AuditLogger().log_error(type(e).__name__, str(e), {"stage": "startup"})
            st.error(f"Failed to initialize: {e}")
            render_connection_status()
            st.stop()
    return st.session_state.components


def go(app: AppComponents, route: Route) -> None:
    app.navigator.navigate(route)
    st.rerun()


def show_result(app: AppComponents, result: ActionResult) -> None:
    """Remember the result for the next render, then follow next_route."""
    st.session_state.alert = result
    if result.next_route:
        app.navigator.navigate(Route(result.next_route))
    st.rerun()


def render_alert() -> None:
    result = st.session_state.pop("alert", None)
    if result is None or not (result.title or result.message):
        return
    text = f"**{result.title}**  \n{result.message}" if result.message else f"**{result.title}**"
    if result.success:
        st.success(text)
    else:
        st.error(text)


def render_screen_error(controller) -> None:
    if controller.error:
        st.error(controller.error)
        controller.dismiss_error()


def main():
    app = get_components()
    app.navigator.navigate(app.navigator.current_route)

    render_alert()

    renderers = {
        Route.SPLASH: render_splash,
        Route.WELCOME: render_welcome,
        Route.LOGIN: render_login,
        Route.SIGNUP: render_signup,
        Route.ONBOARDING_STEP1: render_onboarding_step1,
        Route.ONBOARDING_STEP2: render_onboarding_step2,
        Route.ONBOARDING_FORM: render_onboarding_form,
        Route.HOME: render_home,
        Route.GOALS: render_goals,
        Route.WALLET: render_wallet,
        Route.INVEST: render_invest,
        Route.PROFILE: render_profile,
    }

    if app.navigator.current_route in MAIN_TABS:
        render_tab_bar(app)

    renderers[app.navigator.current_route](app)


# =============================================================================
# AUTH FLOW
# =============================================================================

def render_splash(app: AppComponents):
    st.title("💰 FinanceZ")
    st.markdown("Your money, your future")
    with st.spinner("Building your financial freedom"):
        run_async(app.session.settle())
    st.rerun()


def render_welcome(app: AppComponents):
    st.title(f"💰 Welcome to {app.settings.app.app_name}")
    if st.button("Get Started", type="primary"):
        go(app, Route.SIGNUP)
    if st.button("Already have an account? Sign In"):
        go(app, Route.LOGIN)


def render_login(app: AppComponents):
    st.title("Welcome Back")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary")

    if submitted:
        with st.spinner("Signing In..."):
            result = run_async(app.session.sign_in(SignInForm(email=email, password=password)))
        show_result(app, result)

    if st.button("Don't have an account? Sign Up"):
        go(app, Route.SIGNUP)


def render_signup(app: AppComponents):
    st.title("Create Account")
    with st.form("signup"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm Password", type="password")
        submitted = st.form_submit_button("Create Account", type="primary")

    if submitted:
        with st.spinner("Creating Account..."):
            result = run_async(app.session.sign_up(SignUpForm(
                email=email,
                password=password,
                confirm_password=confirm,
            )))
        show_result(app, result)

    if st.button("Already have an account? Sign In"):
        go(app, Route.LOGIN)


# =============================================================================
# ONBOARDING FLOW
# =============================================================================

def render_onboarding_step1(app: AppComponents):
    st.caption("1 of 3")
    st.title("Set Your Goals")
    st.markdown("**Smart Goal Tracking**: watch every savings goal fill up as you save.")
    if st.button("Continue", type="primary"):
        go(app, Route.ONBOARDING_STEP2)
    if st.button("Skip for now"):
        go(app, Route.ONBOARDING_FORM)


def render_onboarding_step2(app: AppComponents):
    st.caption("2 of 3")
    st.title("Grow Your Money")
    st.markdown("**Diversified Portfolios**: see all your holdings and how they move each day.")
    if st.button("Continue", type="primary"):
        go(app, Route.ONBOARDING_FORM)
    if st.button("Skip for now"):
        go(app, Route.ONBOARDING_FORM)


def render_onboarding_form(app: AppComponents):
    st.title("Tell Us About Yourself")
    st.markdown("This helps us personalize your experience.")

    with st.form("onboarding"):
        st.subheader("Personal Information")
        full_name = st.text_input("Full Name")
        age = st.text_input("Age")
        occupation = st.text_input("Occupation")

        st.subheader("Financial Snapshot")
        monthly_income = st.text_input("Monthly Income")

        st.subheader("What are your financial goals?")
        goals = st.multiselect(
            "Goals",
            options=list(FINANCIAL_GOAL_OPTIONS),
            format_func=lambda g: f"{FINANCIAL_GOAL_OPTIONS[g]} {g}",
            label_visibility="collapsed",
        )

        st.subheader("What's your investment style?")
        risk = st.radio(
            "Risk tolerance",
            options=[r.value for r in RiskTolerance],
            format_func=str.title,
            index=None,
            label_visibility="collapsed",
        )
        submitted = st.form_submit_button("Complete Profile", type="primary")

    if submitted:
        form = OnboardingForm(
            full_name=full_name,
            age=age,
            occupation=occupation,
            monthly_income=monthly_income,
            financial_goals=goals,
            risk_tolerance=risk or "",
        )
        with st.spinner("Saving..."):
            result = run_async(app.onboarding.complete(form))
        show_result(app, result)


# =============================================================================
# MAIN FLOW
# =============================================================================

def render_tab_bar(app: AppComponents):
    current = app.navigator.current_route
    choice = st.sidebar.radio(
        "FinanceZ",
        options=list(MAIN_TABS),
        index=list(MAIN_TABS).index(current),
        format_func=lambda r: TAB_LABELS[r],
    )
    if choice != current:
        go(app, choice)
    if st.sidebar.button("↻ Refresh"):
        st.session_state.refresh = True


def load(controller):
    """Focus the controller, or refresh it if the user asked to."""
    if st.session_state.pop("refresh", False):
        return run_async(controller.on_refresh())
    return run_async(controller.on_focus())


def render_home(app: AppComponents):
    view = load(app.home)
    render_screen_error(app.home)
    if view is None:
        return
    symbol = app.settings.app.currency_symbol

    st.title(f"Hey {view.greeting_name}! 👋")
    st.markdown("Ready to grow your money?")

    st.markdown("Total Balance")
    st.markdown(
        f'<div class="big-number">{format_money(view.total_balance, symbol)}</div>',
        unsafe_allow_html=True,
    )

    st.subheader("Savings Goals")
    for goal in view.recent_goals:
        st.markdown(f"{goal.emoji} **{goal.title}**  {format_money(goal.current_amount, symbol)} "
                    f"of {format_money(goal.target_amount, symbol)}")
        st.progress(goal.display_progress / 100)

    st.subheader("Recent Activity")
    for tx in view.recent_transactions:
        st.markdown(f"{tx.icon} **{tx.title}** · {tx.merchant} · {time_ago(tx.created_at)}"
                    f"  `{format_signed_amount(tx.amount, symbol)}`")


def render_goals(app: AppComponents):
    view = load(app.goals)
    render_screen_error(app.goals)
    symbol = app.settings.app.currency_symbol

    st.title("Savings Goals")
    if view is not None:
        col1, col2, col3 = st.columns(3)
        col1.metric("Total Saved", format_money(view.summary.total_saved, symbol))
        col2.metric("Goals", view.summary.goal_count)
        col3.metric("Progress", format_percent(view.summary.average_progress))

        for goal in view.goals:
            st.markdown(f"{goal.emoji} **{goal.title}**")
            if goal.deadline:
                st.caption(f"Target: {goal.deadline:%x}")
            st.progress(goal.display_progress / 100)
            st.caption(f"{format_money(goal.current_amount, symbol)} of "
                       f"{format_money(goal.target_amount, symbol)} · "
                       f"{format_money(goal.remaining, symbol)} to go")

    with st.expander("➕ Create New Goal"):
        with st.form("create_goal", clear_on_submit=True):
            title = st.text_input("Goal Title")
            target = st.text_input("Target Amount")
            emoji = st.selectbox("Emoji", options=GOAL_EMOJI_OPTIONS)
            submitted = st.form_submit_button("Create Goal", type="primary")
        if submitted:
            result = run_async(app.goals.create_goal(
                GoalDraft(title=title, target_amount=target, emoji=emoji)
            ))
            show_result(app, result)


def render_wallet(app: AppComponents):
    view = load(app.wallet)
    render_screen_error(app.wallet)
    if view is None:
        return
    symbol = app.settings.app.currency_symbol
    visible = app.wallet.show_balance

    st.title("My Wallet")
    if st.button("🙈 Hide balances" if visible else "👁 Show balances"):
        app.wallet.toggle_balance()
        st.rerun()

    for card in view.cards:
        st.markdown(f"**{card.card_name}** ({card.card_type})  {card.masked_number}")
        st.markdown(format_balance(card.balance, visible, symbol))

    col1, col2 = st.columns(2)
    col1.metric("Income", format_balance(view.cashflow.income, visible, symbol))
    col2.metric("Spending", format_balance(view.cashflow.spending, visible, symbol))

    st.subheader("Transactions")
    for tx in view.transactions:
        st.markdown(f"{tx.icon} **{tx.title}** · {tx.merchant} · {time_ago(tx.created_at)}"
                    f"  `{format_signed_amount(tx.amount, symbol)}`")


def render_invest(app: AppComponents):
    view = load(app.invest)
    render_screen_error(app.invest)
    if view is None:
        return
    symbol = app.settings.app.currency_symbol
    summary = view.summary

    st.title("Investments")
    st.metric(
        "Portfolio Value",
        format_money(summary.portfolio_value, symbol),
        f"{format_signed_amount(summary.total_change, symbol)} today "
        f"({format_percent(summary.total_change_percent, signed=True)})",
    )

    st.subheader("Your Holdings")
    for holding in view.holdings:
        st.markdown(
            f"**{holding.symbol}** {holding.name}  {format_money(holding.value, symbol)}  "
            f"`{format_signed_amount(holding.change_amount, symbol)} "
            f"({format_percent(float(holding.change_percent), signed=True)})`"
        )

    st.subheader("Recommended for You")
    for rec in view.recommendations:
        st.markdown(f"**{rec.title}**: {rec.description}  \n"
                    f"Risk: {rec.risk} · Potential return: {rec.potential_return}")


def render_profile(app: AppComponents):
    view = load(app.profile)
    render_screen_error(app.profile)
    symbol = app.settings.app.currency_symbol

    if view is not None and view.profile is not None:
        st.title(view.profile.display_name)
        st.caption(view.profile.email)
        st.caption(f"Member since {view.member_since}")

        col1, col2, col3 = st.columns(3)
        col1.metric("Goals", view.stats.goals)
        col2.metric("Saved", format_money(view.stats.saved, symbol))
        col3.metric("Total", format_money(view.total_worth, symbol))

    st.markdown("---")
    if st.button("Sign Out"):
        result = run_async(app.profile.sign_out())
        show_result(app, result)

    with st.expander("Connection Status"):
        render_connection_status()


def render_connection_status():
    status = validate_all_settings()
    for name, key in (("Supabase (Backend)", "supabase"), ("App settings", "app")):
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")


if __name__ == "__main__":
    main()
