import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import date, timedelta

import pandas as pd
import plotly.express as px
import streamlit as st

from cashbook.config import (
    StoreConfig,
    config_error,
    configure_logging,
    load_settings,
    load_store_config,
)
from cashbook.domain import Entry, Party, today_iso
from cashbook.events import banner_active, default_bus
from cashbook.export import (
    BANK_COLUMNS,
    BANK_SHEET,
    SELF_COLUMNS,
    SELF_SHEET,
    XLSX_MIME,
    export_filename,
    to_csv_bytes,
    to_excel_bytes,
)
from cashbook.gateway import connect
from cashbook.loaders import Snapshot, daily_totals, load_snapshot
from cashbook.money import format_rupees
from cashbook.services import CollectionService
from cashbook.transforms import (
    available_parties,
    group_by_party,
    party_lookup,
    party_name,
    total_for_party,
)

configure_logging()
logger = logging.getLogger("cashbook.app")

st.set_page_config(page_title="CashFlow - Daily Cash Collection", page_icon="💰", layout="wide")

settings = load_settings()
store_config = load_store_config()
setup_error = config_error(store_config)


@st.cache_resource
def get_store(url: str, key: str):
    return connect(StoreConfig(url=url, key=key))


service = None
if not setup_error:
    try:
        service = CollectionService(get_store(store_config.url, store_config.key), bus=default_bus(settings.banner_timeout))
    except Exception as e:
        logger.exception("Could not create the store client")
        setup_error = f"Could not connect to Supabase: {e}"

read_only = service is None
today = today_iso()


def rupees(amount) -> str:
    return format_rupees(amount, settings.currency)


def load(date_filter=None, account_filter=None) -> Snapshot:
    if read_only:
        return Snapshot(entries=[], parties=[])
    return asyncio.run(load_snapshot(service, date_filter, account_filter))


def show_banner():
    banner = st.session_state.get("banner")
    if not banner_active(banner):
        st.session_state.pop("banner", None)
        return
    if banner.kind == "success":
        st.success(banner.message)
    else:
        st.error(banner.message)


def finish(result) -> bool:
    """Handle the Either returned by a service mutation; rerun on success."""
    if result.is_right():
        st.session_state["banner"] = service.banner
        st.session_state.pop("pending_delete", None)
        st.rerun()
    if service.banner is not None:
        st.session_state["banner"] = service.banner
    st.error(result.get_error()["message"])
    return False


def entries_frame(entries, parties) -> pd.DataFrame:
    lookup = party_lookup(parties)
    return pd.DataFrame(
        [
            {
                "ID": e.id,
                "Date": pd.to_datetime(e.date).strftime("%d %b %Y"),
                "Party": party_name(lookup, e.account_no),
                "Account No": e.account_no,
                "Amount": rupees(e.amount),
                "Collector": e.collector,
            }
            for e in entries
        ],
        columns=["ID", "Date", "Party", "Account No", "Amount", "Collector"],
    )


def filter_form(key: str):
    """Date / account filter kept in session state under `key`."""
    current = st.session_state.get(key, {"date": None, "account_no": ""})
    with st.form(f"{key}_form"):
        c1, c2 = st.columns(2)
        with c1:
            picked = st.date_input("Date", value=current["date"], key=f"{key}_date")
        with c2:
            account = st.text_input("Account No", value=current["account_no"], max_chars=3, key=f"{key}_account")
        f1, f2 = st.columns(2)
        apply = f1.form_submit_button("🔍 Filter", disabled=read_only)
        clear = f2.form_submit_button("✖ Clear", disabled=read_only)
    if apply:
        st.session_state[key] = {"date": picked, "account_no": account.strip()}
        st.rerun()
    if clear:
        st.session_state.pop(key, None)
        st.rerun()
    date_value = current["date"].isoformat() if current["date"] else None
    return date_value, current["account_no"] or None


def delete_controls(kind: str, items, describe):
    """Pick a record to delete; the store call only happens after Confirm."""
    pending = st.session_state.get("pending_delete")
    if pending and pending[0] == kind:
        _, item_id, text = pending
        st.warning(f"Are you sure you want to delete {text}?")
        c1, c2 = st.columns(2)
        if c1.button("✅ Confirm delete", key=f"confirm_{kind}"):
            if kind == "entry":
                finish(service.delete_entry(item_id))
            else:
                finish(service.delete_party(item_id))
        if c2.button("Cancel", key=f"cancel_{kind}"):
            st.session_state.pop("pending_delete", None)
            st.rerun()

    with st.expander(f"🗑 Delete {kind}"):
        options = {describe(i): i.id for i in items if i.id is not None}
        if not options:
            st.caption("Nothing to delete.")
            return
        choice = st.selectbox("Select", list(options), key=f"delete_{kind}_choice")
        if st.button("Delete", key=f"delete_{kind}", disabled=read_only):
            st.session_state["pending_delete"] = (kind, options[choice], choice)
            st.rerun()


def describe_entry(lookup):
    def _describe(e: Entry) -> str:
        return f"#{e.id} · {e.date} · {party_name(lookup, e.account_no)} ({e.account_no}) · {rupees(e.amount)}"

    return _describe


def describe_party(p: Party) -> str:
    return f"#{p.id} · {p.label}"


st.sidebar.markdown(f"## 💰 {settings.company}")
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "📒 Collections", "🗂 Master Data", "📑 Reports", "👤 Profile"],
)

if setup_error:
    st.error(f"⚠️ {setup_error}")

show_banner()

if menu == "🏠 Dashboard":
    st.title("Daily Cash Collection")

    snapshot = load()
    entries, parties = snapshot.entries, snapshot.parties
    today_total = service.total_for_date(today) if not read_only else 0

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Today's Collection", rupees(today_total))
    with k2:
        st.metric("Entries", len(entries))
    with k3:
        st.metric("Parties", len(parties))

    st.header("➕ Add Collection Entry")
    search = st.text_input("Search party (name or account no)", key="party_search", disabled=read_only)
    choices = available_parties(parties, entries, search, today)
    selected = st.selectbox(
        "Party",
        options=[None, *choices],
        format_func=lambda p: "Select a party" if p is None else p.label,
        disabled=read_only,
    )
    if search and not choices:
        st.caption("No matching party without a collection today.")

    with st.form("entry_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            entry_date = st.date_input("Date", value=date.today(), disabled=read_only)
            account_no = st.text_input(
                "Account No",
                value=selected.account_no if selected else "",
                max_chars=3,
                disabled=read_only,
            )
        with c2:
            amount = st.text_input("Amount (Rs.)", placeholder="0.00", disabled=read_only)
            collector = st.selectbox("Collector", settings.collectors, disabled=read_only)
        submitted = st.form_submit_button("Add Entry", disabled=read_only)

    if selected:
        st.info(f"Total collection for {selected.name}: {rupees(total_for_party(entries, selected.account_no))}")

    if submitted:
        finish(service.add_entry(entry_date.isoformat() if entry_date else "", account_no, amount, collector))

    st.header("📋 Party Report (Today)")
    if parties:
        report_party = st.selectbox("Party", parties, format_func=lambda p: p.label, key="report_party")
        if st.button("Generate report", disabled=read_only):
            report = service.party_today_report(report_party.account_no, parties)
            if report is not None:
                name, amount_today = report
                st.metric(f"{name} (today)", rupees(amount_today))
            else:
                st.error("Party not found")
    else:
        st.caption("Add parties in Master Data first.")

    st.header("💸 Entries")
    date_filter, account_filter = filter_form("dashboard_filters")
    if date_filter or account_filter:
        entries = load(date_filter, account_filter).entries
        if date_filter:
            st.caption(f"Total for {date_filter}: {rupees(service.total_for_date(date_filter))}")

    if entries:
        st.dataframe(entries_frame(entries, parties), hide_index=True, use_container_width=True)
        st.download_button(
            "⬇ Export to Excel",
            data=to_excel_bytes(service.self_export_rows(entries, parties), SELF_SHEET, SELF_COLUMNS),
            file_name=export_filename("Cash_Collections", today),
            mime=XLSX_MIME,
        )
        delete_controls("entry", entries, describe_entry(party_lookup(parties)))
    else:
        st.info("No entries found.")

elif menu == "📒 Collections":
    st.title("📒 Collections History")
    date_filter, account_filter = filter_form("collections_filters")
    snapshot = load(date_filter, account_filter)
    entries, parties = snapshot.entries, snapshot.parties

    c1, c2 = st.columns(2)
    c1.metric("Entries", len(entries))
    c2.metric("Total", rupees(sum((e.amount for e in entries), 0)))

    if entries:
        st.dataframe(entries_frame(entries, parties), hide_index=True, use_container_width=True)
        delete_controls("entry", entries, describe_entry(party_lookup(parties)))
    else:
        st.info("No collections match the current filters.")

elif menu == "🗂 Master Data":
    st.title("🗂 Master Data")
    parties = load().parties

    st.header("➕ Add Party")
    with st.form("party_form", clear_on_submit=True):
        c1, c2 = st.columns([3, 1])
        with c1:
            name = st.text_input("Party Name", disabled=read_only)
        with c2:
            party_account = st.text_input("Account No", max_chars=3, disabled=read_only)
        add_party = st.form_submit_button("Add Party", disabled=read_only)
    if add_party:
        finish(service.add_party(name, party_account))

    st.header(f"👥 Parties ({len(parties)})")
    if parties:
        st.dataframe(
            pd.DataFrame([{"ID": p.id, "Account No": p.account_no, "Name": p.name} for p in parties]),
            hide_index=True,
            use_container_width=True,
        )
        delete_controls("party", parties, describe_party)
    else:
        st.info("No parties yet.")

elif menu == "📑 Reports":
    st.title("📑 Reports")
    date_filter, account_filter = filter_form("report_filters")
    snapshot = load(date_filter, account_filter)
    entries, parties = snapshot.entries, snapshot.parties

    report_date = date_filter or today
    total = service.total_for_date(report_date) if not read_only else 0
    k1, k2 = st.columns(2)
    k1.metric(f"Total Collection ({report_date})", rupees(total))
    k2.metric("Entries in view", len(entries))

    st.header("🏷 Party-wise Collection")
    totals = group_by_party(entries, parties)
    if totals:
        df_party = pd.DataFrame([{"Party": n, "Amount": float(a)} for n, a in totals])
        fig = px.bar(df_party, x="Party", y="Amount", labels={"Amount": f"Amount ({settings.currency})"}, template="plotly_white")
        st.plotly_chart(fig, use_container_width=True)
        st.table(df_party.assign(Amount=[rupees(a) for _, a in totals]))
    else:
        st.info("No collections to report.")

    st.header("📈 Last 7 Days")
    if not read_only:
        days = [(date.today() - timedelta(days=i)).isoformat() for i in range(6, -1, -1)]
        per_day = asyncio.run(daily_totals(service, days))
        df_days = pd.DataFrame({"Date": list(per_day), "Amount": [float(v) for v in per_day.values()]})
        st.plotly_chart(px.line(df_days, x="Date", y="Amount", markers=True, template="plotly_white"), use_container_width=True)

    st.header("⬇ Export")
    self_rows = service.self_export_rows(entries, parties) if not read_only else []
    bank_rows = service.bank_export_rows(entries, parties) if not read_only else []
    e1, e2 = st.columns(2)
    with e1:
        st.subheader("Self format")
        st.download_button("Excel", to_excel_bytes(self_rows, SELF_SHEET, SELF_COLUMNS),
                           file_name=export_filename("Cash_Collections", today), mime=XLSX_MIME,
                           disabled=not self_rows, key="self_xlsx")
        st.download_button("CSV", to_csv_bytes(self_rows, SELF_COLUMNS),
                           file_name=export_filename("Cash_Collections", today, "csv"),
                           disabled=not self_rows, key="self_csv")
    with e2:
        st.subheader("Bank format")
        st.download_button("Excel", to_excel_bytes(bank_rows, BANK_SHEET, BANK_COLUMNS),
                           file_name=export_filename("Bank_Statement", today), mime=XLSX_MIME,
                           disabled=not bank_rows, key="bank_xlsx")
        st.download_button("CSV", to_csv_bytes(bank_rows, BANK_COLUMNS),
                           file_name=export_filename("Bank_Statement", today, "csv"),
                           disabled=not bank_rows, key="bank_csv")
    if bank_rows:
        st.dataframe(pd.DataFrame([r.as_record() for r in bank_rows]), hide_index=True, use_container_width=True)

elif menu == "👤 Profile":
    st.title("👤 Profile")
    tab_profile, tab_settings, tab_data, tab_about = st.tabs(["Profile", "Settings", "Data", "About"])

    with tab_profile:
        st.subheader("User Information")
        st.markdown("**Admin User**  \nAdministrator")

    with tab_settings:
        st.subheader("Application Settings")
        st.write("Collectors:", ", ".join(settings.collectors))
        st.write("Currency:", settings.currency)
        st.write(f"Messages disappear after {settings.banner_timeout:g} seconds.")
        st.write("Store:", "not configured" if read_only else store_config.url)

    with tab_data:
        st.subheader("Data Management")
        snapshot = load()
        d1, d2 = st.columns(2)
        d1.metric("Entries", len(snapshot.entries))
        d2.metric("Parties", len(snapshot.parties))
        st.download_button(
            "⬇ Export all collections",
            to_excel_bytes(service.self_export_rows(snapshot.entries, snapshot.parties) if not read_only else [], SELF_SHEET, SELF_COLUMNS),
            file_name=export_filename("Cash_Collections", today),
            mime=XLSX_MIME,
            disabled=read_only,
        )

    with tab_about:
        st.subheader(f"About {settings.company}")
        st.caption("Daily cash collection tracking: entries, parties, reports and spreadsheet export.")
