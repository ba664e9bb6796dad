"""
Streamlit Login UI — authenticates through AuthSession against POST /auth/login.

On success the session is persisted by the Session Store and the router
lands on the role's dashboard (the login page is replaced in history).
"""

import streamlit as st

from sf_dashboard.auth import AuthError


def show_login(auth, router):
    """Render the login page and handle authentication."""

    _, middle, _ = st.columns([1, 2, 1])
    middle.title("School Feeding")
    middle.caption("Digital School Management Platform")

    # ── Login form ──
    with middle.form("login_form", border=True):
        email = st.text_input("Email Address", placeholder="Enter your email")
        password = st.text_input("Password", type="password", placeholder="Enter your password")
        submitted = st.form_submit_button("Sign In", use_container_width=True)

    if submitted:
        if not email or not password:
            st.error("Please enter both email and password.")
            return

        try:
            auth.login(email.strip(), password, navigate=router.navigate)
        except AuthError as e:
            st.error(f"Login failed: {e}")
            return
        st.rerun()

    st.markdown("---")
    st.caption("Don't have an account? Contact your administrator.")
