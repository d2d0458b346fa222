import streamlit as st
import requests
import pandas as pd
from datetime import datetime
import os
from dotenv import load_dotenv

load_dotenv()

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")

STATUS_OPTIONS = ["pending", "approved", "rejected"]

def main():
    st.set_page_config(
        page_title="Waitlist Admin",
        page_icon="🔮",
        layout="wide"
    )

    st.title("🔮 Waitlist Admin")
    st.markdown("---")

    if not login_sidebar():
        st.info("Enter the admin credentials in the sidebar to continue.")
        return

    # Navigation
    page = st.sidebar.selectbox(
        "Choose a page",
        ["Overview", "Registrants", "Referrals", "Analytics"]
    )

    if page == "Overview":
        overview_page()
    elif page == "Registrants":
        registrants_page()
    elif page == "Referrals":
        referrals_page()
    elif page == "Analytics":
        analytics_page()

def login_sidebar():
    """Collect basic-auth credentials once per session"""
    if 'auth' not in st.session_state:
        st.session_state.auth = None

    with st.sidebar.form("login_form"):
        username = st.text_input("Username", value="admin")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Log in"):
            st.session_state.auth = (username, password)

    return st.session_state.auth is not None

def api_request(method, path, **kwargs):
    """Call the admin API with the session's credentials; returns parsed JSON or None"""
    try:
        response = requests.request(
            method,
            f"{API_BASE_URL}{path}",
            auth=st.session_state.auth,
            timeout=10,
            **kwargs
        )
    except requests.RequestException as e:
        st.error(f"Error: {str(e)}")
        return None

    if response.status_code == 401:
        st.session_state.auth = None
        st.error("Invalid admin credentials.")
        return None
    if response.status_code != 200:
        st.error(f"Error: {response.status_code} - {error_message(response)}")
        return None
    return response.json()

def error_message(response):
    try:
        return response.json().get("error", response.text)
    except ValueError:
        return response.text

def overview_page():
    st.header("📊 Overview")

    stats = api_request("GET", "/admin/stats")
    if not stats:
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total registrants", stats['total_users'])
    col2.metric("Pending", stats['pending_users'])
    col3.metric("Approved", stats['approved_users'])
    col4.metric("Avg priority", f"{stats['avg_priority_score']:.1f}")

    col1, col2, col3 = st.columns(3)
    col1.metric("Answered teaser", stats['answered_teaser'])
    col2.metric("Referred", stats['referred_users'])
    col3.metric("Instagram", stats['has_instagram'])

    st.markdown("---")
    render_clear_section()

def render_clear_section():
    if 'show_clear_confirmation' not in st.session_state:
        st.session_state.show_clear_confirmation = False

    if not st.session_state.show_clear_confirmation:
        if st.button("🗑️ Clear Waitlist", type="primary"):
            st.session_state.show_clear_confirmation = True
            st.rerun()
        return

    st.warning("⚠️ Are you sure you want to delete ALL registrants? This cannot be undone!")
    col1, col2 = st.columns([1, 1])

    with col1:
        if st.button("✅ Yes, Delete Everything", type="primary"):
            result = api_request("DELETE", "/admin/clear", json={"confirm": "DELETE"})
            if result:
                st.success(f"✅ {result['message']}")
            st.session_state.show_clear_confirmation = False
            st.rerun()

    with col2:
        if st.button("❌ Cancel"):
            st.session_state.show_clear_confirmation = False
            st.rerun()

def users_to_dataframe(users):
    """Queue-ordered registrants as a display table (position is 1-based)"""
    rows = []
    for position, user in enumerate(users, start=1):
        rows.append({
            'Position': position,
            'Email': user['email'],
            'College': user['college_name'],
            'City': user['city'],
            'Age': user['age'],
            'Instagram': user.get('instagram') or '',
            'Score': user['priority_score'],
            'Referrals': user['referral_count'],
            'Code': user['referral_code'],
            'Referred By': user.get('referred_by') or '',
            'Status': user['status'],
            'Joined': format_date(user['created_at'])
        })
    return pd.DataFrame(rows)

def registrants_page():
    st.header("👥 Registrants")

    if st.button("🔄 Refresh Page"):
        st.rerun()

    data = api_request("GET", "/admin/users")
    if data is None:
        return
    if not data['users']:
        st.info("No registrants yet.")
        return

    users_df = users_to_dataframe(data['users'])
    st.subheader(f"Queue ({data['total']})")
    st.dataframe(users_df, use_container_width=True, hide_index=True)

    st.download_button(
        "⬇️ Download CSV",
        users_df.to_csv(index=False).encode('utf-8'),
        file_name=f"waitlist-{datetime.now():%Y%m%d}.csv",
        mime="text/csv"
    )

    st.subheader("Bulk Actions")
    emails = [user['email'] for user in data['users']]
    with st.form("bulk_form"):
        selected = st.multiselect("Registrants", emails)
        action = st.selectbox("Action", ["status", "priority_boost", "delete"])
        status_value = st.selectbox("New status", STATUS_OPTIONS)
        boost_value = st.number_input("Priority boost", value=10, step=5)

        if st.form_submit_button("Apply"):
            if not selected:
                st.error("Select at least one registrant.")
            else:
                value = status_value if action == "status" else int(boost_value)
                result = api_request(
                    "PUT",
                    "/admin/users/bulk",
                    json={"emails": selected, "action": action, "value": value}
                )
                if result:
                    st.success(f"✅ {result['message']}")
                    st.rerun()

    st.subheader("Individual Status")
    col1, col2, col3 = st.columns([3, 1, 1])
    with col1:
        email = st.selectbox("Registrant", emails, key="status_email")
    with col2:
        status = st.selectbox("Status", STATUS_OPTIONS, key="status_value")
    with col3:
        if st.button("💾 Update"):
            result = api_request(
                "PUT",
                f"/admin/user/{requests.utils.quote(email)}/status",
                json={"status": status}
            )
            if result:
                st.toast(f"✅ {result['message']}")
                st.rerun()

def referrals_page():
    st.header("🔗 Referrals")

    referrals = api_request("GET", "/admin/referrals")
    if referrals is None:
        return
    if not referrals:
        st.info("No referrals yet.")
        return

    referrals_df = pd.DataFrame([
        {
            'Referrer': r['referrer_email'],
            'Code': r['referrer_code'],
            'Referred': r['referred_email'],
            'College': r['referred_college'],
            'When': format_date(r['created_at'])
        }
        for r in referrals
    ])
    st.dataframe(referrals_df, use_container_width=True, hide_index=True)

def analytics_page():
    st.header("📈 Analytics")

    analytics = api_request("GET", "/admin/analytics")
    if not analytics:
        return

    timeline = analytics['registration_timeline']
    if timeline:
        st.subheader("Registrations per day")
        st.bar_chart(pd.Series(timeline, name="Registrations"))

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Colleges")
        colleges = analytics['college_distribution']
        if colleges:
            st.bar_chart(pd.Series(colleges, name="Registrants").sort_values(ascending=False))
    with col2:
        st.subheader("Priority bands")
        st.bar_chart(pd.Series(analytics['priority_distribution'], name="Registrants"))

    referral_stats = analytics['referral_stats']
    st.subheader("Top referrers")
    st.write(
        f"{referral_stats['total_referrals']} referred registrants, "
        f"{referral_stats['active_referrers']} active referrers"
    )
    if referral_stats['top_referrers']:
        st.dataframe(pd.DataFrame(referral_stats['top_referrers']), use_container_width=True, hide_index=True)

def format_date(date_string):
    """Format date string for display"""
    try:
        dt = datetime.fromisoformat(date_string.replace('Z', '+00:00'))
        return dt.strftime('%Y-%m-%d %H:%M')
    except (AttributeError, ValueError):
        return date_string

if __name__ == "__main__":
    main()
