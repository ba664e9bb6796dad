"""
Streamlit entry point — login-gated, role-based dashboard shell.

Flow:
  1. No stored session      → login page
  2. Session present        → sidebar menu for the canonical role,
                              live notification panel, current page
  3. Logout                 → poller stopped, session cleared, back to login

Run:
    streamlit run sf_dashboard/app.py
"""

import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import streamlit as st

# ── Page config (must be first Streamlit call) ────────
st.set_page_config(
    page_title="School Feeding",
    page_icon="🍲",
    layout="wide",
)

from sf_dashboard import config
from sf_dashboard.api_client import ApiClient
from sf_dashboard.auth import AuthSession
from sf_dashboard.login_page import show_login
from sf_dashboard.menus import ROLE_HEADERS, menu_for, profile_route, role_for_route
from sf_dashboard.navigation import Router, guard
from sf_dashboard.notifications import NotificationService
from sf_dashboard.poller import DueScheduler, NotificationPoller
from sf_dashboard.roles import LOGIN_ROUTE, resolve_dashboard
from sf_dashboard.session_store import SessionStore
from sf_dashboard.storage import JsonFileStorage, MappingStorage

PANEL_TICK = 5  # seconds between notification panel re-renders

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


# ════════════════════════════════════════════
# Per-browser-session wiring
# ════════════════════════════════════════════

def _init_client():
    """Build the client objects once per Streamlit session."""
    if "sf_client" in st.session_state:
        return st.session_state.sf_client

    if config.SESSION_FILE:
        storage = JsonFileStorage(config.SESSION_FILE)
    else:
        # Plain dict, kept out of Streamlit's widget state.
        storage = MappingStorage({})
    store = SessionStore(storage)
    router = Router()
    api = ApiClient(store, on_unauthorized=router.redirect)
    scheduler = DueScheduler()
    client = {
        "scheduler": scheduler,
        "store": store,
        "router": router,
        "auth": AuthSession(api, store, navigate=router.navigate, redirect=router.redirect),
        "poller": NotificationPoller(NotificationService(api).fetch, store, scheduler=scheduler),
    }
    st.session_state.sf_client = client
    return client


client = _init_client()
store, router, auth, poller = client["store"], client["router"], client["auth"], client["poller"]
scheduler = client["scheduler"]

# ── Gate: not logged in → show login ─────────────────
session = store.load()
if session is None:
    poller.unbind()
    if router.current != LOGIN_ROUTE:
        guard(store, router, router.current)
    show_login(auth, router)
    st.stop()

role = auth.current_role()
if role is None:
    st.error(f"Unknown role: {session.role}")
    poller.unbind()
    auth.logout()
    st.stop()

if router.current == LOGIN_ROUTE:
    router.navigate(resolve_dashboard(session.role), replace=True)

poller.bind(role)

# ── Sidebar ───────────────────────────────────────────
profile = session.user
name = (profile.names or profile.email or "") if profile else ""
st.sidebar.title(ROLE_HEADERS[role])
st.sidebar.markdown(f"**Logged in as:** {name}")
st.sidebar.divider()

for item in menu_for(role):
    if st.sidebar.button(item.title, key=f"nav-{item.route}", use_container_width=True):
        router.navigate(item.route)
        st.rerun()

st.sidebar.divider()
if st.sidebar.button("Back", use_container_width=True):
    router.back()
    st.rerun()
if st.sidebar.button("Logout", use_container_width=True):
    poller.unbind()
    auth.logout()
    st.rerun()


# ── Notifications ─────────────────────────────────────
# Polling is driven from this fragment, so it stops with the browser session.
@st.fragment(run_every=min(PANEL_TICK, config.POLL_INTERVAL))
def _notification_panel():
    scheduler.run_due()
    count = poller.unread_count
    label = "9+" if count > 9 else str(count)
    with st.expander(f"🔔 Notifications ({label} new)" if count else "🔔 Notifications"):
        if poller.error:
            st.caption("Notifications are temporarily unavailable.")
        feed = poller.notifications[:10]
        if not feed:
            st.caption("No notifications")
        for n in feed:
            when = f" · {n.timestamp:%Y-%m-%d}" if n.timestamp else ""
            st.markdown(f"{n.message}{when}")
            if n.link and st.button("Open", key=f"open-{n.id}"):
                router.navigate(n.link)
                st.rerun()
        if st.button("Refresh", key="notif-refresh"):
            poller.refresh()


# ── Current page ──────────────────────────────────────
owner = role_for_route(router.current)
if owner is not None and owner != role:
    st.error("Access denied for this page.")
    st.stop()

current_title = next((i.title for i in menu_for(role) if i.route == router.current), router.current)
st.title(current_title)
_notification_panel()

if router.current == profile_route(role):
    st.subheader("Profile")
    if session.user:
        st.json(session.user.model_dump(exclude_none=True))
