"""
Streamlit Frontend for SubTrack

The calendar page: pick a month, see its operations and what is
left of the budget.

DESIGN PRINCIPLES:
1. One page, calendar on the left, operations on the right
2. Nothing is saved without an explicit "Add" click
3. Invalid input and storage failures are shown differently
4. Every change re-renders from storage
"""

import asyncio
from datetime import MAXYEAR, MINYEAR, date
from decimal import Decimal

import streamlit as st

from subtrack.audit import create_correlation_id
from subtrack.calendar import MONTH_NAMES, YearRangeError, month_number
from subtrack.config import get_settings, validate_all_settings
from subtrack.models.operation import OperationDraft, OperationKind
from subtrack.orchestrator import CalendarPageFlow, create_app_components, create_calendar_flow
from subtrack.services.storage import SQLiteDatabase, StorageError
from subtrack.validation import OperationValidationError

# Largest amount the forms accept
MAX_INPUT_AMOUNT = 1_000_000_000.0


st.set_page_config(
    page_title="SubTrack",
    page_icon="📅",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .today button {
        border: 2px solid #b0b7c3;
    }
    .balance-positive {
        font-size: 2.2em;
        font-weight: bold;
        color: #28a745;
    }
    .balance-negative {
        font-size: 2.2em;
        font-weight: bold;
        color: #dc3545;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_database() -> SQLiteDatabase:
    """Open the database once per server process."""
    _, database = create_app_components()
    return database


def get_flow() -> CalendarPageFlow:
    """
    Flow for this browser session.

    The database is shared; the cursor lives in the session so
    each tab keeps its own month.
    """
    if "flow" not in st.session_state:
        st.session_state.flow = create_calendar_flow(get_database())
    return st.session_state.flow


def format_amount(amount: Decimal) -> str:
    return f"{amount:+,.2f}"


def main():
    """Main application entry point."""
    try:
        flow = get_flow()
        run_async(flow.ensure_fresh())
    except StorageError as e:
        st.error(f"Could not open your data: {e}")
        render_settings()
        st.stop()

    left, right = st.columns([3, 2])

    with left:
        render_calendar(flow)

    with right:
        render_balance(flow)
        render_operations(flow)

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        render_add_operation(flow)
    with col2:
        render_budget_and_income(flow)

    with st.expander("⚙️ Settings"):
        render_settings()


def navigate(move):
    """Run a month change; stay on the current month if it fails."""
    try:
        run_async(move())
    except YearRangeError as e:
        st.warning(str(e))
        return
    except StorageError as e:
        st.error(f"Could not load the month: {e}")
        return
    st.rerun()


def render_calendar(flow: CalendarPageFlow):
    """Month header, navigation buttons and the day grid."""
    grid = flow.grid()

    prev_col, title_col, next_col = st.columns([1, 3, 1])
    with prev_col:
        if st.button("◀ Previous"):
            navigate(flow.previous_month)
    with title_col:
        st.markdown(f"<h2 style='text-align:center'>{grid.title}</h2>", unsafe_allow_html=True)
    with next_col:
        if st.button("Next ▶"):
            navigate(flow.next_month)

    with st.expander("Jump to month"):
        with st.form("jump-to-month"):
            name = st.selectbox("Month", options=MONTH_NAMES, index=grid.month - 1)
            year = st.number_input(
                "Year",
                min_value=MINYEAR,
                max_value=MAXYEAR,
                value=grid.year,
                step=1,
            )
            if st.form_submit_button("Go"):
                navigate(lambda: flow.go_to(int(year), month_number(name)))

    header_cols = st.columns(7)
    for cell in grid.headers:
        header_cols[cell.column].markdown(f"**{cell.label}**")

    for week in grid.weeks():
        cols = st.columns(7)
        for column, cell in enumerate(week):
            if cell is None:
                cols[column].write("")
                continue
            label = f"[{cell.day}]" if cell.is_selected else str(cell.day)
            if cell.is_today:
                label = f"• {label} •"
            if cols[column].button(label, key=f"day-{grid.year}-{grid.month}-{cell.day}"):
                flow.toggle_day(cell.day)
                st.rerun()


def render_balance(flow: CalendarPageFlow):
    summary = flow.summary
    st.subheader("Balance")
    css = "balance-positive" if summary.balance >= 0 else "balance-negative"
    st.markdown(f"<div class='{css}'>{summary.balance:,.2f}</div>", unsafe_allow_html=True)

    budget = f"{summary.budget:,.2f}" if summary.budget is not None else "not set"
    st.caption(
        f"Budget: {budget} · Income: {summary.total_income:,.2f} · "
        f"Spent: {summary.total_expenses:,.2f}"
    )


def render_operations(flow: CalendarPageFlow):
    """Operation list of the displayed month, with delete buttons."""
    st.subheader("Operations")
    operations = flow.operations
    if not operations:
        st.info("No operations this month.")
        return

    for operation in operations:
        cols = st.columns([4, 2, 2, 1])
        cols[0].markdown(f"**{operation.title}**  \n{operation.category}")
        cols[1].markdown(format_amount(operation.amount))
        day = "every month" if operation.is_recurrent else operation.date.strftime("%d %b")
        cols[2].markdown(f"{operation.recurrence_label}  \n{day}")
        if cols[3].button("🗑", key=f"delete-{operation.id}"):
            try:
                run_async(flow.delete_operation(operation.id))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to delete: {e}")


def render_add_operation(flow: CalendarPageFlow):
    """Add-operation form; nothing is stored until 'Add' is clicked."""
    st.subheader("➕ Add operation")
    draft = flow.new_draft()
    categories = get_settings().app.categories_list

    with st.form("add-operation", clear_on_submit=True):
        title = st.text_input("Title *")
        kind = st.radio(
            "Type",
            options=list(OperationKind),
            format_func=lambda k: k.value.title(),
            horizontal=True,
        )
        amount = st.number_input(
            "Amount *",
            min_value=0.0,
            max_value=MAX_INPUT_AMOUNT,
            step=0.01,
            format="%.2f",
        )
        operation_date = st.date_input("Date *", value=draft.date)
        category = st.selectbox("Category *", options=categories) if categories else st.text_input("Category *")
        is_recurrent = st.checkbox("Repeat every month")
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        draft = OperationDraft(
            title=title,
            amount=Decimal(str(amount)),
            kind=kind,
            date=operation_date,
            category=category,
            is_recurrent=is_recurrent,
        )
        try:
            run_async(flow.add_operation(draft, correlation_id=create_correlation_id()))
            st.rerun()
        except OperationValidationError as e:
            st.warning(flow.validator.get_user_friendly_summary(e.result))
        except StorageError as e:
            st.error(f"Failed to save: {e}")


def render_budget_and_income(flow: CalendarPageFlow):
    """Budget and income of the displayed month."""
    st.subheader("💰 Budget & income")
    summary = flow.summary

    with st.form("budget"):
        budget = st.number_input(
            "Monthly budget",
            value=min(max(float(summary.budget or 0), 0.0), MAX_INPUT_AMOUNT),
            min_value=0.0,
            max_value=MAX_INPUT_AMOUNT,
            step=10.0,
            format="%.2f",
        )
        if st.form_submit_button("Save budget"):
            try:
                run_async(flow.set_monthly_budget(Decimal(str(budget))))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to save budget: {e}")
            except ValueError as e:
                st.warning(f"Please check the budget: {e}")

    with st.form("income", clear_on_submit=True):
        title = st.text_input("Income title")
        amount = st.number_input(
            "Income amount",
            min_value=0.0,
            max_value=MAX_INPUT_AMOUNT,
            step=10.0,
            format="%.2f",
        )
        if st.form_submit_button("Add income"):
            try:
                run_async(flow.add_monthly_income(title, Decimal(str(amount))))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to save income: {e}")
            except ValueError as e:
                st.warning(f"Please check the income: {e}")

    incomes = run_async(flow.list_monthly_incomes())
    for income in incomes:
        st.markdown(f"- {income.title}: {income.amount:,.2f}")


def render_settings():
    """Configuration status."""
    status = validate_all_settings()
    for name, key in [("Database", "database"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} settings OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown(f"Database file: `{get_settings().database.path}`")
    st.markdown(
        "To change the configuration, create a `.env` file. "
        "See `.env.example` for the available variables."
    )
    st.caption(f"Today: {date.today():%d %B %Y}")


if __name__ == "__main__":
    main()
