from financez.session.manager import SIGN_UP_SUCCESS, SessionManager

__all__ = ["SIGN_UP_SUCCESS", "SessionManager"]
