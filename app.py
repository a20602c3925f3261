# ============================================
# DAIRYFLOW - OPERATIONS DASHBOARD
# ============================================
# Run: python -m streamlit run app.py

import streamlit as st

from dairyflow import auth
from dairyflow.api import ApiError, AuthenticationError
from dairyflow.config import load_settings
from dairyflow.logging_config import get_logger, init_logging
from dairyflow.navigation import get_page, visible_pages

settings = load_settings()
init_logging(settings.log_level)
log = get_logger("dairyflow.app")

# Page config
st.set_page_config(
    page_title=settings.brand_name,
    page_icon="🥛",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .stButton button {
        border-radius: 10px;
        font-weight: 600;
    }

    .welcome-banner {
        background: linear-gradient(135deg, #1d4ed8 0%, #0ea5e9 100%);
        padding: 30px;
        border-radius: 15px;
        color: white;
        margin-bottom: 20px;
    }

    .status-draft {
        background-color: #ffc107;
        color: black;
        padding: 5px 15px;
        border-radius: 20px;
        font-weight: bold;
    }

    .status-approved {
        background-color: #28a745;
        color: white;
        padding: 5px 15px;
        border-radius: 20px;
        font-weight: bold;
    }

    .status-cancelled {
        background-color: #dc3545;
        color: white;
        padding: 5px 15px;
        border-radius: 20px;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)

# ============================================
# SESSION STATE
# ============================================

auth.init_session()

# ============================================
# LOGIN SCREEN
# ============================================

def login_screen():
    st.markdown(f"""
    <div class='welcome-banner'>
        <h1 style='color: white; margin: 0;'>🥛 {settings.brand_name}</h1>
        <p style='color: white; margin: 0;'>Dairy Distribution Operations</p>
    </div>
    """, unsafe_allow_html=True)

    if st.session_state.pop("session_expired", False):
        st.warning("⚠️ Your session has expired. Please login again.")

    st.subheader("Welcome! Please Login")

    with st.form("login_form"):
        email = st.text_input("Email", placeholder="you@example.com")
        password = st.text_input("Password", type="password")

        submitted = st.form_submit_button("Login", use_container_width=True, type="primary")

        if submitted:
            if not email.strip() or not password:
                st.error("❌ Please enter your email and password")
                return
            try:
                user = auth.login(auth.api_client(settings=settings), email, password)
            except AuthenticationError:
                st.error("❌ Invalid email or password")
                return
            except ApiError as exc:
                log.warning("Login failed: %s", exc)
                st.error(f"❌ Login failed: {exc}")
                return
            st.success(f"✅ Welcome, {auth.display_name(user)}!")
            st.rerun()

# ============================================
# UNAUTHORIZED SCREEN
# ============================================

def unauthorized_screen():
    st.title("⚠️ Access Denied")
    st.write(
        "You don't have permission to access this page. "
        "This area is restricted based on your user role."
    )
    user = auth.current_user()
    if user:
        st.caption(f"You are signed in as: {auth.display_name(user)} ({user.get('role')})")
    if st.button("Go to Dashboard", type="primary"):
        st.session_state.current_page = auth.DEFAULT_PAGE
        st.rerun()

# ============================================
# SIDEBAR
# ============================================

def sidebar():
    with st.sidebar:
        st.title(f"🥛 {settings.brand_name}")

        for group, pages in visible_pages():
            st.markdown("---")
            st.caption(group)
            for page in pages:
                button_type = "primary" if st.session_state.current_page == page.key else "secondary"
                if st.button(f"{page.icon} {page.label}", key=f"nav_{page.key}",
                             use_container_width=True, type=button_type):
                    st.session_state.current_page = page.key
                    st.rerun()

        st.markdown("---")

        user = auth.current_user() or {}
        st.caption(f"**{auth.display_name(user)}**")
        st.caption(f"Role: {user.get('role', '')}")

        if st.button("🚪 Logout", use_container_width=True):
            auth.logout()
            st.rerun()

# ============================================
# MAIN APP
# ============================================

def main():
    if not auth.is_authenticated():
        login_screen()
        return

    sidebar()

    page = get_page(st.session_state.current_page) or get_page(auth.DEFAULT_PAGE)
    if not auth.can_access(page.roles):
        log.info("Blocked %s from %s", (auth.current_user() or {}).get("role"), page.key)
        unauthorized_screen()
        return

    try:
        page.screen()
    except AuthenticationError:
        auth.logout()
        st.session_state.session_expired = True
        st.rerun()

if __name__ == "__main__":
    main()
