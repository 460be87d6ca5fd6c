"""
C-CRED Registry - Streamlit Operator Dashboard
Projects, verification queue, credits and marketplace
"""

import streamlit as st
import requests
import pandas as pd
from datetime import datetime
import plotly.graph_objects as go
import plotly.express as px

# Page configuration
st.set_page_config(
    page_title="C-CRED Registry",
    page_icon="🌿",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Sidebar configuration
st.sidebar.title("⚙️ Configuration")
api_url = st.sidebar.text_input("API Base URL", value="http://localhost:5000", key="api_url")
reviewer = st.sidebar.text_input("Reviewer", value="registry-operator")


def make_request(method: str, endpoint: str, data=None, params=None):
    """Call the registry API and unwrap errors from the response envelope."""
    url = f"{st.session_state.api_url}{endpoint}"
    try:
        response = requests.request(method, url, json=data, params=params, timeout=10)
    except requests.exceptions.RequestException as e:
        st.error(f"API Error: {e}")
        return None

    body = response.json() if response.text else {}
    if not response.ok:
        st.error(f"API Error ({response.status_code}): {body.get('error', response.reason)}")
        return None
    return body


def fetch_data(endpoint: str, params=None):
    body = make_request("GET", endpoint, params=params)
    return body.get("data") if body else None


st.title("🌿 C-CRED Registry")
st.markdown("**Carbon credit registry: field data, verification, issuance and marketplace**")

tab1, tab2, tab3, tab4 = st.tabs(["📊 Portfolio", "🔍 Verification Queue", "🛒 Marketplace", "🏥 Health"])

# ============ PORTFOLIO TAB ============
with tab1:
    st.header("Credit Portfolio")

    portfolio = fetch_data("/credits/portfolio")
    if portfolio:
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("🌱 Total Credits (tCO2e)", f"{portfolio.get('total_credits', 0):,.2f}")
        with col2:
            st.metric("✅ Active Credits", portfolio.get("active_credits", 0))
        with col3:
            st.metric("📁 Projects", len(portfolio.get("credits_by_project", [])))

        rows = [
            {
                "Project": entry.get("project_name"),
                "Credits": len(entry.get("credits", [])),
                "Amount": sum(c.get("credits_amount", 0) for c in entry.get("credits", []))
            }
            for entry in portfolio.get("credits_by_project", [])
        ]
        if rows:
            df = pd.DataFrame(rows)
            fig = px.bar(df, x="Project", y="Amount", title="Issued credits by project")
            st.plotly_chart(fig, width="stretch")
            st.dataframe(df, width="stretch", hide_index=True)

    st.divider()

    st.subheader("Credits")
    status_filter = st.selectbox("Filter by Status", ["All", "active", "retired", "cancelled"])
    params = None if status_filter == "All" else {"status": status_filter}
    credits = fetch_data("/credits", params=params)
    if credits:
        df = pd.DataFrame([
            {
                "Serial Number": credit.get("serial_number"),
                "Project": credit.get("project_id"),
                "Amount": credit.get("credits_amount"),
                "Vintage": credit.get("vintage"),
                "Status": credit.get("status"),
                "Issued": credit.get("created_at", "")[:10]
            }
            for credit in credits
        ])
        st.dataframe(df, width="stretch", hide_index=True)

        status_counts = df["Status"].value_counts()
        fig = go.Figure(data=[go.Pie(labels=status_counts.index.tolist(), values=status_counts.values.tolist())])
        fig.update_layout(height=350)
        st.plotly_chart(fig, width="stretch")
    else:
        st.info("No credits found")

# ============ VERIFICATION TAB ============
with tab2:
    st.header("Verification Queue")

    if st.button("🔄 Refresh Queue"):
        st.rerun()

    queue = []
    for queue_status in ("pending", "under_review", "more_data_requested"):
        queue.extend(fetch_data("/verification/submissions", params={"status": queue_status}) or [])

    if not queue:
        st.info("No submissions awaiting a decision")

    for submission in queue:
        submission_id = submission.get("id")
        with st.expander(f"{submission_id} · {submission.get('data_type')} · {submission.get('status')}"):
            st.json(submission)

            col1, col2 = st.columns(2)
            with col1:
                with st.form(f"approve_{submission_id}", border=True):
                    credits_generated = st.number_input("Credits generated", min_value=0.0, value=0.0, step=1.0)
                    quality_score = st.slider("Quality score", 0, 100, 80)
                    if st.form_submit_button("✅ Approve", width="stretch"):
                        result = make_request("POST", f"/verification/submissions/{submission_id}/approve", {
                            "credits_generated": credits_generated,
                            "quality_score": quality_score,
                            "reviewed_by": reviewer
                        })
                        if result:
                            st.success(f"Approved {submission_id}")
                            st.rerun()
            with col2:
                with st.form(f"reject_{submission_id}", border=True):
                    reason = st.text_input("Rejection reason")
                    if st.form_submit_button("❌ Reject", width="stretch"):
                        if not reason:
                            st.error("A rejection reason is required")
                        else:
                            result = make_request("POST", f"/verification/submissions/{submission_id}/reject", {
                                "reason": reason,
                                "reviewed_by": reviewer
                            })
                            if result:
                                st.success(f"Rejected {submission_id}")
                                st.rerun()

# ============ MARKETPLACE TAB ============
with tab3:
    st.header("Marketplace")

    col1, col2, col3 = st.columns(3)
    with col1:
        category = st.selectbox("Project category", [
            "All", "reforestation", "afforestation", "forest_conservation", "agroforestry",
            "wetland_restoration", "grassland_restoration", "renewable_energy",
            "energy_efficiency", "methane_capture", "soil_carbon", "blue_carbon"
        ])
    with col2:
        min_price = st.number_input("Min price", min_value=0.0, value=0.0)
    with col3:
        max_price = st.number_input("Max price", min_value=0.0, value=0.0, help="0 means no upper bound")

    params = {"min_price": min_price}
    if category != "All":
        params["category"] = category
    if max_price > 0:
        params["max_price"] = max_price

    listings = fetch_data("/marketplace/credits", params=params)
    if listings:
        df = pd.DataFrame([
            {
                "Listing": listing.get("id"),
                "Credit": listing.get("credit_id"),
                "Price": listing.get("price"),
                "Currency": listing.get("currency"),
                "Available": listing.get("available_quantity"),
                "Minimum": listing.get("minimum_quantity"),
                "Listed": listing.get("listed_at", "")[:10]
            }
            for listing in listings
        ])
        st.dataframe(df, width="stretch", hide_index=True)
    else:
        st.info("No active listings match the filters")

    st.subheader("Price Statistics")
    stats = fetch_data("/marketplace/prices")
    if stats:
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Average", f"{stats.get('average_price', 0):.2f}")
        with col2:
            st.metric("Min", f"{stats.get('min_price', 0):.2f}")
        with col3:
            st.metric("Max", f"{stats.get('max_price', 0):.2f}")
        with col4:
            st.metric("Active listings", stats.get("total_listings", 0))

        price_range = stats.get("price_range", {})
        fig = go.Figure(data=[go.Bar(
            x=["< 10", "10 - 20", "≥ 20"],
            y=[price_range.get("low", 0), price_range.get("medium", 0), price_range.get("high", 0)],
            marker=dict(color=["#00cc96", "#ffa15a", "#ff6b6b"])
        )])
        fig.update_layout(height=350, xaxis_title="Price band", yaxis_title="Listings")
        st.plotly_chart(fig, width="stretch")

# ============ HEALTH TAB ============
with tab4:
    st.header("API Health")

    col1, col2 = st.columns(2)
    with col1:
        health = make_request("GET", "/health")
        if health:
            st.metric("🟢 Status", health.get("status", "unknown").title())
            st.metric("📦 Version", health.get("version", "N/A"))
            st.json(health)

    with col2:
        st.subheader("📈 API Endpoints")
        endpoints = [
            ("POST", "/data/upload", "Upload field data"),
            ("POST", "/data/uploads/{id}/verify", "Submit upload for verification"),
            ("POST", "/verification/submissions/{id}/approve", "Approve submission"),
            ("POST", "/credits/generate", "Issue credit"),
            ("GET", "/credits/portfolio", "Portfolio rollup"),
            ("GET", "/marketplace/credits", "Browse listings"),
            ("GET", "/marketplace/prices", "Price statistics"),
        ]
        st.dataframe(pd.DataFrame(endpoints, columns=["Method", "Endpoint", "Description"]), width="stretch", hide_index=True)

st.divider()
st.markdown(
    f"**C-CRED Registry** | API: {st.session_state.api_url} | "
    f"Last updated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
)
