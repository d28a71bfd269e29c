"""
Streamlit Frontend for the Finance Tracker

This is the interface a user works with day to day.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages when an entry is rejected
3. Visual feedback for all operations
4. No hidden actions

The UI only collects fields and renders results; all rules live
in the ledger:
- User enters a transaction
- The ledger accepts or rejects it
- Nothing is written to disk without an explicit "Save" action
"""

from decimal import Decimal

import streamlit as st

from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.ledger import Account
from finance_tracker.models.ledger import (
    ComparisonOutcome,
    LedgerQuery,
    TransactionKind,
    format_amount,
)
from finance_tracker.orchestrator import LedgerSession
from finance_tracker.services.storage import StorageError, render_snapshot


# Page configuration
st.set_page_config(
    page_title="Personal Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def get_session() -> LedgerSession:
    """Get or create this browser session's ledger session."""
    if "ledger_session" not in st.session_state:
        st.session_state.ledger_session = LedgerSession()
    return st.session_state.ledger_session


def get_account():
    """Account of the signed-in user, if any."""
    return st.session_state.get("account")


def main():
    """Main application entry point."""
    session = get_session()

    st.sidebar.title("💰 Personal Finance Tracker")
    st.sidebar.markdown("---")

    account = get_account()
    if account is None:
        render_login(session)
        return

    st.sidebar.markdown(f"**User:** {account.name}")
    st.sidebar.markdown(f"**Balance:** {format_amount(account.balance)}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Transaction", "📜 View All Transactions", "💾 Save to File",
         "👥 Create Another User", "🧾 Activity", "⚙️ Settings"],
        index=0,
    )

    if page == "➕ Add Transaction":
        render_add_page(session, account)
    elif page == "📜 View All Transactions":
        render_history_page(session, account)
    elif page == "💾 Save to File":
        render_save_page(session, account)
    elif page == "👥 Create Another User":
        render_compare_page(session, account)
    elif page == "🧾 Activity":
        render_activity_page(session)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login(session: LedgerSession):
    """Ask for the user name, or restore a saved snapshot."""
    st.title("Welcome")
    name = st.text_input("Enter your name:")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Start", type="primary") and name.strip():
            try:
                st.session_state.account = session.create_account(
                    name, get_settings().app.primary_initial_balance
                )
                st.rerun()
            except ValueError as e:
                st.error(str(e))
    with col2:
        if st.button("Load saved file") and name.strip():
            try:
                st.session_state.account = session.load(name.strip())
                st.rerun()
            except StorageError as e:
                st.error(str(e))


def render_add_page(session: LedgerSession, account: Account):
    """Render the add transaction form."""
    st.title("➕ Add Transaction")

    with st.form("add_transaction"):
        col1, col2 = st.columns(2)
        with col1:
            kind = st.selectbox(
                "Type",
                options=list(TransactionKind),
                format_func=lambda k: k.value,
            )
            amount = st.number_input("Amount", value=0.0, step=0.01, format="%.2f")
            category = st.text_input("Category")
        with col2:
            date = st.text_input("Date (dd/mm/yyyy)")
            note = st.text_input("Note")
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        result = session.add_transaction(
            account, kind, Decimal(str(amount)), category, date or "N/A", note
        )
        if result.success:
            st.markdown(f"""
            <div class="success-box">
                <h4>✅ Transaction Added Successfully!</h4>
                <p><strong>Balance:</strong> {format_amount(result.balance)}</p>
            </div>
            """, unsafe_allow_html=True)
        else:
            messages = "".join(f"<li>{issue.message}</li>" for issue in result.issues)
            st.markdown(f"""
            <div class="error-box">
                <h4>❌ Error</h4>
                <ul>{messages}</ul>
            </div>
            """, unsafe_allow_html=True)


def render_history_page(session: LedgerSession, account: Account):
    """Render the transaction history."""
    st.title(f"📜 {account.name}'s Transaction History")

    records = session.history(account)
    if not records:
        st.info("No transactions to display.")
        return

    st.table([
        {
            "Type": r.kind.value,
            "Amount": format_amount(r.amount),
            "Category": r.category,
            "Date": r.date,
            "Note": r.note,
        }
        for r in records
    ])
    st.markdown(
        f'<div class="big-number">Current Balance: {format_amount(account.balance)}</div>',
        unsafe_allow_html=True,
    )

    st.markdown("---")
    st.subheader("Totals by category")
    result = session.query(
        account,
        LedgerQuery(query_type="aggregate", aggregation_type="sum", group_by="category"),
    )
    if result.data_found:
        breakdown = result.aggregation_result.get("breakdown", {})
        st.table([
            {"Category": key, "Total": format_amount(value)}
            for key, value in breakdown.items()
        ])


def render_save_page(session: LedgerSession, account: Account):
    """Render snapshot preview and save button."""
    st.title("💾 Save to File")
    try:
        st.markdown(f"File: `{session.snapshot_storage.snapshot_path(account.name)}`")
    except StorageError as e:
        st.error(str(e))
        return

    with st.expander("Preview"):
        st.code(render_snapshot(account), language="text")

    if st.button("Save", type="primary"):
        result = session.save(account)
        if result.success:
            st.success(f"✅ All Transaction Details Saved to File: {result.path}")
        else:
            st.error(f"❌ {result.error_message}")


def render_compare_page(session: LedgerSession, account: Account):
    """Create a sample user and compare balances."""
    st.title("👥 Create Another User")
    other_name = st.text_input("Enter new user name:")

    if st.button("Create and Compare", type="primary") and other_name.strip():
        try:
            st.session_state.other_account = session.create_sample_account(other_name)
        except ValueError as e:
            st.error(str(e))

    other = st.session_state.get("other_account")
    if other is None:
        return

    comparison = session.compare(account, other)
    st.markdown(f"Comparing balances of **{account.name}** and **{other.name}**")
    if comparison.outcome is ComparisonOutcome.EQUAL:
        st.info(comparison.describe())
    else:
        st.success(comparison.describe())
    st.markdown(f"**Total Users:** {session.total_users()}")

    if st.button(f"Save {other.name}'s data to file"):
        result = session.save(other)
        if result.success:
            st.success(f"✅ Saved to {result.path}")
        else:
            st.error(f"❌ {result.error_message}")


def render_activity_page(session: LedgerSession):
    """Show the audit trail for this session."""
    st.title("🧾 Activity")
    storage = session.audit_logger.storage
    events = storage.get_recent_events(limit=50) if storage else []
    if not events:
        st.info("No activity yet.")
        return
    for event in events:
        st.markdown(
            f"`{event.timestamp:%H:%M:%S}` **{event.event_type.value}** {event.description}"
        )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    status = validate_all_settings()
    for name, key in [("Ledger", "ledger"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} settings loaded")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables or a `.env` file "
        "(`LEDGER_INITIAL_BALANCE`, `LEDGER_SNAPSHOT_DIR`, ...)."
    )


if __name__ == "__main__":
    main()
