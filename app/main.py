"""
Streamlit Frontend for Personal Ledger

This is the user interface the owner uses to keep their books: record
journal transactions, maintain the cashbook, track investments and read the
dashboard for a financial year.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Show validation problems before anything is saved
3. Clear error messages in simple language
4. Visual feedback for all operations
5. No hidden actions

The UI is gated by a single password. A signed session token lives in the
Streamlit session and is re-verified on every render.
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from src.audit import configure_logging, create_correlation_id
from src.calculations import (
    InsufficientQuantityError,
    calculate_cash_flow,
    group_portfolio_by_type,
)
from src.config import get_settings, validate_all_settings
from src.models.financial import (
    AccountType,
    CashbookEntryType,
    CategoryType,
    EntryDraft,
    InvestmentTransactionType,
    InvestmentType,
    TransactionDraft,
)
from src.orchestrator import (
    AuthenticationError,
    AuthFlow,
    DashboardFlow,
    LedgerFlow,
    TransactionRejectedError,
    create_app_components,
)
from src.periods import (
    FinancialYearSelection,
    get_financial_year_dates,
    get_months_in_financial_year,
    list_financial_years,
)
from src.services.storage import (
    GoogleSheetsLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from src.validation import summarize_validation, validate_transaction


# Page configuration
st.set_page_config(
    page_title="Personal Ledger",
    page_icon="📒",
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
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


PAGES = [
    "📊 Dashboard",
    "📒 Ledger",
    "🏦 Cashbook",
    "📈 Investments",
    "🗂️ Accounts",
    "⚙️ Settings",
]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    configure_logging(get_settings().app.log_level)
    components = create_app_components(use_storage=True)
    _, _, _, storage = components
    run_async(storage.initialize())
    return components


def money(amount: Decimal) -> str:
    currency = get_settings().app.currency
    symbol = "₹" if currency == "INR" else f"{currency} "
    return f"{symbol}{amount:,.2f}"


def label(value: str) -> str:
    return str(getattr(value, "value", value)).replace("_", " ").title()


def get_selection() -> FinancialYearSelection:
    """One financial-year selection per browser session."""
    if "fy_selection" not in st.session_state:
        selection = FinancialYearSelection()
        # Months belong to a year; forget the chosen month when the year changes
        selection.subscribe(lambda _: st.session_state.pop("dashboard_month", None))
        st.session_state.fy_selection = selection
    return st.session_state.fy_selection


def main():
    """Main application entry point."""
    try:
        ledger_flow, dashboard_flow, auth_flow, storage = get_components()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        st.stop()

    if not auth_flow.verify(st.session_state.get("auth_token")):
        render_login_page(auth_flow)
        return

    selection = get_selection()

    # Sidebar navigation
    st.sidebar.title("📒 Personal Ledger")
    st.sidebar.markdown("---")

    year_infos = list_financial_years()
    years = [info.year for info in year_infos]
    chosen = st.sidebar.selectbox(
        "Financial Year",
        options=year_infos,
        index=years.index(selection.selected) if selection.selected in years else 0,
        format_func=lambda info: f"FY {info.year}" + (" (current)" if info.is_current else ""),
    )
    selection.select(chosen.year)

    page = st.sidebar.radio("Navigate to:", PAGES, index=0)

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        st.session_state.pop("auth_token", None)
        st.rerun()

    financial_year = selection.selected

    try:
        if page == "📊 Dashboard":
            render_dashboard_page(dashboard_flow, financial_year)
        elif page == "📒 Ledger":
            render_ledger_page(ledger_flow, financial_year)
        elif page == "🏦 Cashbook":
            render_cashbook_page(ledger_flow, financial_year)
        elif page == "📈 Investments":
            render_investments_page(ledger_flow)
        elif page == "🗂️ Accounts":
            render_accounts_page(ledger_flow)
        elif page == "⚙️ Settings":
            render_settings_page(ledger_flow, storage)
    except StorageError as e:
        st.markdown(f"""
        <div class="error-box">
            <h4>❌ Could not reach your spreadsheet</h4>
            <p>{e}</p>
        </div>
        """, unsafe_allow_html=True)


def render_login_page(auth_flow: AuthFlow):
    """Render the password gate."""
    st.title("🔐 Personal Ledger")
    st.markdown("Enter your password to open your books.")

    with st.form("login"):
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            st.session_state.auth_token = run_async(auth_flow.login(password))
            st.rerun()
        except AuthenticationError as e:
            st.error(str(e))


def render_dashboard_page(dashboard_flow: DashboardFlow, financial_year: str):
    """Render the dashboard page."""
    st.title("📊 Dashboard")

    months = get_months_in_financial_year(financial_year)
    current = st.session_state.get("dashboard_month")
    if current not in months:
        current = DashboardFlow.default_month(financial_year)
    month = st.selectbox(
        "Month",
        options=months,
        index=months.index(current),
        key="dashboard_month",
    )

    with st.spinner("Crunching the numbers..."):
        dashboard = run_async(
            dashboard_flow.build(
                financial_year,
                month=month,
                correlation_id=create_correlation_id(),
            )
        )
    summary = dashboard.summary

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Net Worth", money(summary.net_worth))
    col2.metric("Total Assets", money(summary.total_assets))
    col3.metric("Total Liabilities", money(summary.total_liabilities))
    col4.metric("Cash", money(summary.cash_balance))

    col1, col2, col3 = st.columns(3)
    col1.metric("Income this month", money(summary.monthly_income))
    col2.metric("Expenses this month", money(summary.monthly_expenses))
    col3.metric(
        "Investments",
        money(dashboard.portfolio.current_value),
        delta=f"{dashboard.portfolio.total_gain_loss_percentage:.2f}%",
    )

    st.markdown("---")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("🧾 Recent Transactions")
        if dashboard.recent_transactions:
            st.dataframe(
                [
                    {
                        "Date": t.date.isoformat(),
                        "Description": t.description,
                        "Amount": money(t.total_amount),
                        "Balanced": "✅" if t.is_balanced else "⚠️",
                    }
                    for t in dashboard.recent_transactions
                ],
                use_container_width=True,
                hide_index=True,
            )
        else:
            st.info("No transactions recorded in this financial year yet.")

    with col2:
        st.subheader("🏷️ Expenses by Category")
        if dashboard.expenses_by_category:
            st.bar_chart(
                {item.category: float(item.amount) for item in dashboard.expenses_by_category}
            )
        else:
            st.info("No expenses recorded in this financial year yet.")

    if dashboard.investment_performance:
        st.subheader("📈 Investment Performance")
        st.dataframe(
            [
                {
                    "Symbol": i.symbol,
                    "Invested": money(i.total_investment),
                    "Value": money(i.current_value),
                    "Gain/Loss": money(i.gain_loss),
                    "Return %": f"{i.gain_loss_percentage:.2f}",
                }
                for i in dashboard.investment_performance
            ],
            use_container_width=True,
            hide_index=True,
        )

    with st.expander("📑 Balance Sheet & Income Statement"):
        balance_sheet, income_statement = run_async(
            dashboard_flow.statements(financial_year)
        )
        col1, col2 = st.columns(2)
        with col1:
            st.markdown(f"**Balance sheet as of {balance_sheet.as_of_date:%d %b %Y}**")
            for title, lines, total in [
                ("Assets", balance_sheet.assets, balance_sheet.total_assets),
                ("Liabilities", balance_sheet.liabilities, balance_sheet.total_liabilities),
                ("Equity", balance_sheet.equity, balance_sheet.total_equity),
            ]:
                st.markdown(f"*{title}*: {money(total)}")
                for line in lines:
                    st.markdown(f"- {line.account_name}: {money(line.amount)}")
        with col2:
            st.markdown(f"**Income statement FY {financial_year}**")
            st.markdown(f"*Income*: {money(income_statement.total_income)}")
            st.markdown(f"*Expenses*: {money(income_statement.total_expenses)}")
            st.markdown(f"*Net income*: {money(income_statement.net_income)}")


def render_ledger_page(ledger_flow: LedgerFlow, financial_year: str):
    """Render the journal: list, filter and record transactions."""
    st.title("📒 Ledger")

    accounts = run_async(ledger_flow.storage.get_accounts())
    transactions = run_async(ledger_flow.storage.get_transactions(financial_year))
    account_names = {a.id: f"{a.id} · {a.name}" for a in accounts}

    account_filter = st.selectbox(
        "Filter by Account",
        options=[None] + list(account_names),
        format_func=lambda x: "All Accounts" if x is None else account_names[x],
    )
    if account_filter:
        transactions = [
            t for t in transactions
            if any(e.account_id == account_filter for e in t.entries)
        ]

    if transactions:
        st.dataframe(
            [
                {
                    "Date": t.date.isoformat(),
                    "Description": t.description,
                    "Reference": t.reference or "",
                    "Category": t.category or "",
                    "Amount": money(t.total_amount),
                    "Entries": ", ".join(
                        f"{e.account_name or e.account_id} "
                        f"{'Dr' if e.debit else 'Cr'} {e.debit or e.credit}"
                        for e in t.entries
                    ),
                }
                for t in sorted(transactions, key=lambda t: t.date, reverse=True)
            ],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("📋 No transactions for this selection.")

    st.markdown("---")
    st.subheader("➕ Record Transaction")

    if not accounts:
        st.warning("Create some accounts first on the Accounts page.")
        return

    col1, col2 = st.columns(2)
    with col1:
        txn_date = st.date_input("Date *", value=date.today())
        description = st.text_input("Description *")
    with col2:
        reference = st.text_input("Reference (optional)")
        category = st.text_input("Category (optional)")

    line_count = st.number_input("Number of entries", min_value=2, max_value=10, value=2)
    entries = []
    for idx in range(int(line_count)):
        col1, col2, col3 = st.columns([3, 1, 1])
        account_id = col1.selectbox(
            f"Account #{idx + 1}",
            options=list(account_names),
            format_func=lambda x: account_names[x],
            key=f"entry_account_{idx}",
        )
        debit = col2.number_input("Debit", min_value=0.0, step=0.01, key=f"entry_debit_{idx}")
        credit = col3.number_input("Credit", min_value=0.0, step=0.01, key=f"entry_credit_{idx}")
        entries.append(EntryDraft(
            account_id=account_id,
            debit=Decimal(str(debit)),
            credit=Decimal(str(credit)),
        ))

    draft = TransactionDraft(
        date=txn_date,
        description=description,
        reference=reference or None,
        category=category or None,
        entries=entries,
    )
    result = validate_transaction(draft)
    if result.is_valid:
        st.success(summarize_validation(result))
    else:
        st.warning(summarize_validation(result))

    if st.button("💾 Save Transaction", type="primary", disabled=not result.is_valid):
        try:
            transaction = run_async(ledger_flow.record_transaction(draft))
            st.success(f"Saved: {transaction.description} ({money(transaction.total_amount)})")
            st.rerun()
        except TransactionRejectedError as e:
            st.error("Could not save:\n" + "\n".join(f"• {error}" for error in e.errors))


def render_cashbook_page(ledger_flow: LedgerFlow, financial_year: str):
    """Render the bank/cash book."""
    st.title("🏦 Cashbook")

    entries = run_async(ledger_flow.cashbook(financial_year))
    bank_accounts = sorted({e.bank_account for e in entries if e.bank_account})

    bank_filter = st.selectbox(
        "Bank Account",
        options=[None] + bank_accounts,
        format_func=lambda x: "All Accounts" if x is None else x,
    )

    start_date, end_date = get_financial_year_dates(financial_year)
    shown = run_async(ledger_flow.cashbook(financial_year, bank_filter))
    flow = calculate_cash_flow(shown, start_date, end_date)

    col1, col2, col3 = st.columns(3)
    col1.metric("Inflow", money(flow.total_inflow))
    col2.metric("Outflow", money(flow.total_outflow))
    col3.metric("Net", money(flow.net_cash_flow))

    if shown:
        st.dataframe(
            [
                {
                    "Date": e.date.isoformat(),
                    "Description": e.description,
                    "Bank": e.bank_account,
                    "Type": label(e.type),
                    "Amount": money(e.amount),
                    "Balance": money(e.balance),
                    "Reconciled": "✅" if e.reconciled else "",
                }
                for e in shown
            ],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("📋 No cashbook entries for this selection.")

    st.markdown("---")
    st.subheader("➕ Add Entry")

    with st.form("cashbook_entry", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            entry_date = st.date_input("Date *", value=date.today())
            description = st.text_input("Description *")
            bank_account = st.text_input("Bank Account *", value=bank_filter or "")
        with col2:
            entry_type = st.selectbox(
                "Type *",
                options=list(CashbookEntryType),
                format_func=label,
            )
            amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
            category = st.text_input("Category (optional)")
        submitted = st.form_submit_button("💾 Save Entry", type="primary")

    if submitted:
        if not description or not bank_account:
            st.error("Please enter a description and bank account")
        elif amount <= 0:
            st.error("Please enter a valid amount")
        else:
            entry = run_async(
                ledger_flow.record_cashbook_entry(
                    entry_date=entry_date,
                    description=description,
                    bank_account=bank_account,
                    entry_type=entry_type,
                    amount=Decimal(str(amount)),
                    category=category,
                )
            )
            st.success(f"Saved. Balance on {entry.bank_account}: {money(entry.balance)}")


def render_investments_page(ledger_flow: LedgerFlow):
    """Render the portfolio."""
    st.title("📈 Investments")

    investments = run_async(ledger_flow.storage.get_investments())

    type_filter = st.selectbox(
        "Filter by Type",
        options=[None] + list(InvestmentType),
        format_func=lambda x: "All Types" if x is None else label(x),
    )
    shown = [i for i in investments if type_filter is None or i.type == type_filter]

    if shown:
        by_type = group_portfolio_by_type(shown)
        cols = st.columns(max(len(by_type), 1))
        for col, (investment_type, value) in zip(cols, by_type.items()):
            col.metric(
                label(investment_type),
                money(value.current_value),
                delta=f"{value.total_gain_loss_percentage:.2f}%",
            )

        st.dataframe(
            [
                {
                    "Symbol": i.symbol,
                    "Name": i.name,
                    "Type": label(i.type),
                    "Qty": str(i.quantity),
                    "Avg Price": money(i.average_price),
                    "Price": money(i.current_price),
                    "Value": money(i.current_value),
                    "Gain/Loss": money(i.gain_loss),
                }
                for i in shown
            ],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("📋 No investments for this selection.")

    st.markdown("---")
    tab_add, tab_trade, tab_price = st.tabs(["➕ Add Holding", "🔁 Buy / Sell", "🏷️ Update Price"])

    with tab_add:
        with st.form("add_investment", clear_on_submit=True):
            symbol = st.text_input("Symbol *")
            name = st.text_input("Name")
            investment_type = st.selectbox("Type", options=list(InvestmentType), format_func=label)
            quantity = st.number_input("Quantity *", min_value=0.0, step=1.0)
            average_price = st.number_input("Average Price *", min_value=0.0, step=0.01)
            if st.form_submit_button("💾 Add", type="primary"):
                if not symbol:
                    st.error("Please enter a symbol")
                else:
                    run_async(ledger_flow.add_investment(
                        symbol=symbol,
                        name=name,
                        investment_type=investment_type,
                        quantity=Decimal(str(quantity)),
                        average_price=Decimal(str(average_price)),
                    ))
                    st.rerun()

    if not investments:
        return
    holdings = {i.id: f"{i.symbol} ({i.quantity})" for i in investments}

    with tab_trade:
        with st.form("trade", clear_on_submit=True):
            investment_id = st.selectbox("Holding", options=list(holdings), format_func=holdings.get)
            trade_type = st.selectbox("Type", options=list(InvestmentTransactionType), format_func=label)
            trade_date = st.date_input("Date", value=date.today())
            quantity = st.number_input("Quantity *", min_value=0.0, step=1.0)
            price = st.number_input("Price *", min_value=0.0, step=0.01)
            fees = st.number_input("Fees", min_value=0.0, step=0.01)
            if st.form_submit_button("💾 Record", type="primary"):
                try:
                    run_async(ledger_flow.record_investment_transaction(
                        investment_id=investment_id,
                        trade_date=trade_date,
                        trade_type=trade_type,
                        quantity=Decimal(str(quantity)),
                        price=Decimal(str(price)),
                        fees=Decimal(str(fees)),
                    ))
                    st.rerun()
                except InsufficientQuantityError as e:
                    st.error(str(e))
                except ValueError as e:
                    st.error(f"Invalid trade: {e}")

    with tab_price:
        with st.form("price", clear_on_submit=True):
            investment_id = st.selectbox("Holding", options=list(holdings), format_func=holdings.get)
            current_price = st.number_input("Current Price *", min_value=0.0, step=0.01)
            if st.form_submit_button("💾 Update", type="primary"):
                run_async(ledger_flow.update_investment_price(
                    investment_id, Decimal(str(current_price))
                ))
                st.rerun()


def render_accounts_page(ledger_flow: LedgerFlow):
    """Render the chart of accounts."""
    st.title("🗂️ Accounts")

    accounts = run_async(ledger_flow.storage.get_accounts())
    if accounts:
        st.dataframe(
            [
                {
                    "Code": a.id,
                    "Name": a.name,
                    "Type": label(a.type),
                    "Sub-type": a.sub_type,
                    "Balance": money(a.balance),
                    "Active": "✅" if a.is_active else "—",
                }
                for a in sorted(accounts, key=lambda a: a.id)
            ],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("📋 No accounts yet. Create your first one below.")

    if st.button("🔄 Recalculate balances from the journal"):
        refreshed = run_async(ledger_flow.refresh_account_balances())
        st.success(f"Checked {len(refreshed)} accounts.")

    st.markdown("---")
    st.subheader("➕ New Account")
    st.markdown(
        "*Accounts open at zero. Record an opening balance as a transaction "
        "against an equity account.*"
    )

    with st.form("new_account", clear_on_submit=True):
        name = st.text_input("Name *")
        account_type = st.selectbox("Type *", options=list(AccountType), format_func=label)
        sub_type = st.text_input("Sub-type", placeholder="Cash, Bank, Credit Card...")
        if st.form_submit_button("💾 Create", type="primary"):
            if not name:
                st.error("Please enter the account name")
            else:
                account = run_async(ledger_flow.create_account(name, account_type, sub_type))
                st.success(f"Created account {account.id} · {account.name}")


def render_settings_page(ledger_flow: LedgerFlow, storage: LedgerStorageInterface):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Login", "auth"),
        ("Application", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if isinstance(storage, GoogleSheetsLedgerStorage):
        st.info("📄 Your books are stored in Google Sheets.")
    else:
        st.warning("🧪 Running on in-memory storage. Nothing will be kept after a restart.")

    st.markdown("---")
    st.markdown("### Categories")

    categories = run_async(storage.get_categories())
    for category_type in CategoryType:
        names = [c.name for c in categories if c.type == category_type and c.is_active]
        st.markdown(f"**{label(category_type)}:** {', '.join(names) or '—'}")

    with st.form("new_category", clear_on_submit=True):
        col1, col2 = st.columns(2)
        name = col1.text_input("Category name")
        category_type = col2.selectbox("Type", options=list(CategoryType), format_func=label)
        if st.form_submit_button("➕ Add Category") and name:
            run_async(ledger_flow.add_category(name, category_type))
            st.rerun()

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your settings. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
