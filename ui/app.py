"""Streamlit UI for the trip planner.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from datetime import date, timedelta  # noqa: E402
from typing import Any  # noqa: E402

import httpx  # noqa: E402
import streamlit as st  # noqa: E402

from ui import helpers  # noqa: E402
from voyage.accounts.credentials import SECURITY_QUESTIONS  # noqa: E402
from voyage.config import get_settings  # noqa: E402
from voyage.models.common import Currency, ShoppingPriority, TransportMode  # noqa: E402
from voyage.planning.sections import CUSTOM_CATEGORY, PACKING_PRESETS  # noqa: E402

# Configuration
BACKEND_URL = get_settings().backend_url
CURRENCIES = [c.value for c in Currency]
CONCERT_DETAILS = (
    ("Merch", "merchTime"),
    ("Entry", "entryTime"),
    ("Start", "startTime"),
    ("Seat", "seat"),
)

# Page config
st.set_page_config(
    page_title="Voyage Trip Planner",
    page_icon="✈️",
    layout="wide",
)

# Initialize session state
for key, default in (("token", None), ("username", None), ("selected_id", None), ("error", None)):
    if key not in st.session_state:
        st.session_state[key] = default


def _show_http_error(e: httpx.HTTPStatusError) -> None:
    st.session_state.error = helpers.auth_error_message(e)


def _edit(method: str, path: str, json: Any = None) -> None:
    """Run a section edit against the selected trip, then redraw."""
    try:
        helpers.edit_section(
            BACKEND_URL, st.session_state.token, st.session_state.selected_id, method, path, json
        )
        st.session_state.error = None
    except httpx.HTTPStatusError as e:
        _show_http_error(e)
    st.rerun()


# =============================================================================
# LOGIN PAGE
# =============================================================================
def render_login() -> None:
    st.title("✈️ Voyage")
    tab_login, tab_register, tab_forgot = st.tabs(["登入", "註冊", "忘記密碼"])

    with tab_login, st.form("login_form"):
        username = st.text_input("帳號")
        password = st.text_input("密碼", type="password")
        if st.form_submit_button("登入", type="primary", use_container_width=True):
            try:
                session = helpers.login(BACKEND_URL, username, password)
                st.session_state.token = session["token"]
                st.session_state.username = session["username"]
                st.session_state.error = None
            except httpx.HTTPStatusError as e:
                _show_http_error(e)
            st.rerun()

    with tab_register, st.form("register_form"):
        username = st.text_input("帳號", key="reg_user")
        password = st.text_input("密碼", type="password", key="reg_pass")
        question = st.selectbox("安全提問", options=list(SECURITY_QUESTIONS))
        answer = st.text_input("答案", key="reg_answer")
        if st.form_submit_button("註冊", use_container_width=True):
            try:
                session = helpers.register(BACKEND_URL, username, password, question, answer)
                st.session_state.token = session["token"]
                st.session_state.username = session["username"]
                st.session_state.error = None
            except httpx.HTTPStatusError as e:
                _show_http_error(e)
            st.rerun()

    with tab_forgot:
        username = st.text_input("帳號", key="forgot_user")
        if username:
            try:
                question = helpers.get_security_question(BACKEND_URL, username)
            except httpx.HTTPStatusError as e:
                st.warning(helpers.auth_error_message(e))
            else:
                with st.form("reset_form"):
                    st.caption(question)
                    answer = st.text_input("答案", key="forgot_answer")
                    new_password = st.text_input("新密碼", type="password")
                    if st.form_submit_button("重設密碼"):
                        try:
                            helpers.reset_password(BACKEND_URL, username, answer, new_password)
                            st.success("密碼已重設，請重新登入。")
                        except httpx.HTTPStatusError as e:
                            st.error(helpers.auth_error_message(e))

    if st.session_state.error:
        st.error(f"❌ {st.session_state.error}")


# =============================================================================
# SIDEBAR - TRIP LIST + NEW TRIP
# =============================================================================
def render_sidebar(trips: list[dict[str, Any]]) -> None:
    with st.sidebar:
        st.markdown(f"**{st.session_state.username}**")
        if st.button("登出"):
            helpers.logout(BACKEND_URL, st.session_state.token)
            st.session_state.token = None
            st.session_state.selected_id = None
            st.rerun()

        with st.expander("變更密碼"), st.form("change_password_form"):
            old_password = st.text_input("舊密碼", type="password")
            new_password = st.text_input("新密碼", type="password")
            if st.form_submit_button("更新"):
                try:
                    helpers.change_password(
                        BACKEND_URL, st.session_state.token, old_password, new_password
                    )
                    st.success("密碼已更新")
                except httpx.HTTPStatusError as e:
                    st.error(helpers.auth_error_message(e))

        st.subheader("🧳 My Trips")
        for trip in trips:
            if st.button(helpers.trip_label(trip), key=f"trip_{trip['id']}"):
                st.session_state.selected_id = trip["id"]
                st.rerun()

        with st.expander("➕ New Trip"), st.form("new_trip_form"):
            title = st.text_input("Title *")
            city = st.text_input("Destination City *")
            start = st.date_input("Start Date *", value=date.today())
            end = st.date_input("End Date *", value=date.today() + timedelta(days=2))
            vibe = st.text_input("Vibe", help="Comma-separated tags")
            if st.form_submit_button("Create", type="primary"):
                try:
                    created = helpers.create_itinerary(
                        BACKEND_URL,
                        st.session_state.token,
                        helpers.trip_details_payload(title, city, start, end, vibe),
                    )
                    st.session_state.selected_id = created["id"]
                    st.session_state.error = None
                except httpx.HTTPStatusError as e:
                    _show_http_error(e)
                st.rerun()


# =============================================================================
# SECTION TABS
# =============================================================================
def render_activity(trip: dict[str, Any], day: dict[str, Any], activity: dict[str, Any]) -> None:
    col_text, col_copy, col_del = st.columns([6, 1, 1])
    with col_text:
        link = f" [📍]({activity['map_url']})" if activity["map_url"] else ""
        st.markdown(f"- {activity['line']}{link}")
        if activity["notes"]:
            st.caption(activity["notes"])
    base = f"days/{day['id']}/activities/{activity['id']}"
    if col_copy.button("⧉", key=f"copy_{activity['id']}"):
        _edit("POST", f"{base}/copy")
    if col_del.button("🗑", key=f"del_{activity['id']}"):
        _edit("DELETE", base)

    with st.expander("✏️ Edit / move"):
        with st.form(f"edit_activity_{activity['id']}"):
            location = st.text_input("Location", value=activity["location"])
            time_slot = st.text_input("Time", value=activity["time_slot"])
            notes = st.text_input("Notes", value=activity["notes"])
            if st.form_submit_button("Save"):
                _edit("PUT", base, {"location": location, "time_slot": time_slot, "notes": notes})

        targets = helpers.move_targets(trip, day["day"])
        if targets:
            col_target, col_move = st.columns([3, 1])
            target = col_target.selectbox(
                "Move to day", options=targets, key=f"move_to_{activity['id']}"
            )
            if col_move.button("Move", key=f"move_{activity['id']}"):
                _edit("POST", f"{base}/move", {"target_day": target})


def render_itinerary_tab(trip: dict[str, Any]) -> None:
    for day in helpers.build_day_view(trip):
        st.markdown(f"#### {day['heading']}")
        with st.popover("Theme"), st.form(f"theme_{day['id']}"):
            theme = st.text_input("Theme", value=day["theme"])
            if st.form_submit_button("Save theme"):
                _edit("PUT", f"days/{day['id']}/theme", {"theme": theme})

        for activity in day["activities"]:
            render_activity(trip, day, activity)

        with st.form(f"add_activity_{day['id']}", clear_on_submit=True):
            col_loc, col_time = st.columns([3, 1])
            location = col_loc.text_input("Location", key=f"loc_{day['id']}")
            time_slot = col_time.text_input("Time", key=f"time_{day['id']}")
            notes = st.text_input("Notes", key=f"notes_{day['id']}")
            if st.form_submit_button("Add activity"):
                _edit(
                    "POST",
                    f"days/{day['id']}/activities",
                    {"location": location, "time_slot": time_slot, "notes": notes},
                )


def render_packing_tab(trip: dict[str, Any]) -> None:
    for item in trip["packing_list"]:
        col_check, col_del = st.columns([6, 1])
        checked = col_check.checkbox(
            f"{item['name']} ({item['category']})", value=item["checked"], key=f"pk_{item['id']}"
        )
        if checked != item["checked"]:
            _edit("POST", f"packing/{item['id']}/toggle")
        if col_del.button("🗑", key=f"pk_del_{item['id']}"):
            _edit("DELETE", f"packing/{item['id']}")

    with st.form("add_packing", clear_on_submit=True):
        name = st.text_input("Item")
        category = st.selectbox("Category", options=[*PACKING_PRESETS, CUSTOM_CATEGORY])
        custom = st.text_input("Custom category")
        if st.form_submit_button("Add"):
            _edit(
                "POST",
                "packing",
                {"name": name, "category": category, "custom_category": custom},
            )


def _date_or_none(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def transport_form(key: str, mode: str, existing: dict[str, Any] | None = None) -> None:
    """Add (``existing`` is None) or edit a booking of the given mode."""
    current = existing or {}
    with st.form(key, clear_on_submit=existing is None):
        form: dict[str, Any] = {"detail": st.text_input("Detail", value=current.get("detail", ""))}
        col_cost, col_cur = st.columns(2)
        form["cost"] = col_cost.number_input(
            "Cost", min_value=0.0, step=100.0, value=float(current.get("cost", 0))
        )
        form["currency"] = col_cur.selectbox(
            "Currency",
            options=CURRENCIES,
            index=CURRENCIES.index(current.get("currency", CURRENCIES[0])),
        )

        if mode == TransportMode.car_rental.value:
            col_pick, col_ret = st.columns(2)
            with col_pick:
                form["pickupLocation"] = st.text_input(
                    "Pickup location", value=current.get("pickupLocation", "")
                )
                form["pickupDate"] = st.date_input(
                    "Pickup date", value=_date_or_none(current.get("pickupDate"))
                )
                form["pickupTime"] = st.text_input(
                    "Pickup time", value=current.get("pickupTime", "")
                )
            with col_ret:
                form["returnLocation"] = st.text_input(
                    "Return location", value=current.get("returnLocation", "")
                )
                form["returnDate"] = st.date_input(
                    "Return date", value=_date_or_none(current.get("returnDate"))
                )
                form["returnTime"] = st.text_input(
                    "Return time", value=current.get("returnTime", "")
                )
            form["isSameLocation"] = st.checkbox(
                "Return to pickup location", value=current.get("isSameLocation", False)
            )
        else:
            col_date, col_dep, col_arr = st.columns(3)
            form["date"] = col_date.date_input("Date", value=_date_or_none(current.get("date")))
            form["time"] = col_dep.text_input("Departure", value=current.get("time", ""))
            form["arrivalTime"] = col_arr.text_input(
                "Arrival", value=current.get("arrivalTime", "")
            )
            if mode == TransportMode.flight.value:
                col_a, col_b, col_c = st.columns(3)
                form["flightNumber"] = col_a.text_input(
                    "Flight no.", value=current.get("flightNumber", "")
                )
                form["gate"] = col_b.text_input("Gate", value=current.get("gate", ""))
                form["seat"] = col_c.text_input("Seat", value=current.get("seat", ""))
                col_t1, col_t2 = st.columns(2)
                form["terminal"] = col_t1.text_input(
                    "Terminal", value=current.get("terminal", "")
                )
                form["arrivalTerminal"] = col_t2.text_input(
                    "Arrival terminal", value=current.get("arrivalTerminal", "")
                )

        if st.form_submit_button("Save booking" if existing else "Add booking"):
            body = helpers.transport_payload(mode, form, existing)
            if existing:
                _edit("PUT", f"transports/{existing['id']}", body)
            else:
                _edit("POST", "transports", body)


def render_transport_tab(trip: dict[str, Any]) -> None:
    for t in trip["transports"]:
        with st.container(border=True):
            st.markdown(f"**({t['type']}) {t['detail']}** · {t['currency']} {t['cost']}")
            for index, image in enumerate(t["images"]):
                st.image(image, width=200)
                if st.button("Remove image", key=f"img_del_{t['id']}_{index}"):
                    _edit("DELETE", f"transports/{t['id']}/images/{index}")
            upload = st.file_uploader("Attach ticket", key=f"upload_{t['id']}")
            if upload is not None and st.button("Upload", key=f"upload_btn_{t['id']}"):
                _edit(
                    "POST",
                    f"transports/{t['id']}/images",
                    {"image": helpers.image_to_data_url(upload.getvalue(), upload.type)},
                )
            with st.expander("✏️ Edit"):
                transport_form(f"edit_transport_{t['id']}", t["type"], t)
            if st.button("🗑 Delete", key=f"tr_del_{t['id']}"):
                _edit("DELETE", f"transports/{t['id']}")

    # outside the form so the fields follow the chosen mode
    mode = st.selectbox("Type", options=[m.value for m in TransportMode], key="new_transport_mode")
    transport_form("add_transport", mode)


def concert_form(key: str, default_date: date, existing: dict[str, Any] | None = None) -> None:
    """Add (``existing`` is None) or edit a concert."""
    current = existing or {}
    with st.form(key, clear_on_submit=existing is None):
        form: dict[str, Any] = {
            "artist": st.text_input("Artist *", value=current.get("artist", "")),
            "venue": st.text_input("Venue", value=current.get("venue", "")),
            "date": st.date_input(
                "Date", value=_date_or_none(current.get("date")) or default_date
            ),
        }
        col_merch, col_entry, col_start = st.columns(3)
        form["merchTime"] = col_merch.text_input("Merch time", value=current.get("merchTime", ""))
        form["entryTime"] = col_entry.text_input("Entry time", value=current.get("entryTime", ""))
        form["startTime"] = col_start.text_input("Start time", value=current.get("startTime", ""))
        form["seat"] = st.text_input("Seat", value=current.get("seat", ""))

        col_ticket, col_cost, col_cur = st.columns(3)
        form["ticketCost"] = col_ticket.number_input(
            "Ticket", min_value=0.0, step=100.0, value=float(current.get("ticketCost", 0))
        )
        form["merchCost"] = col_cost.number_input(
            "Merch", min_value=0.0, step=100.0, value=float(current.get("merchCost", 0))
        )
        form["currency"] = col_cur.selectbox(
            "Currency",
            options=CURRENCIES,
            index=CURRENCIES.index(current.get("currency", CURRENCIES[0])),
        )
        form["notes"] = st.text_area("Notes", value=current.get("notes", ""))

        if st.form_submit_button("Save concert" if existing else "Add concert"):
            body = helpers.concert_payload(form, existing)
            if existing:
                _edit("PUT", f"concerts/{existing['id']}", body)
            else:
                _edit("POST", "concerts", body)


def render_concert_tab(trip: dict[str, Any]) -> None:
    start = date.fromisoformat(trip["startDate"])
    for c in sorted(trip["concerts"], key=lambda c: c["date"]):
        with st.container(border=True):
            total = c["ticketCost"] + c["merchCost"]
            st.markdown(
                f"**{c['artist']}** @ {c['venue']} · {c['date']} · "
                f"{c['currency']} {helpers.format_amount(total)}"
            )
            times = " · ".join(
                f"{label} {c[key]}" for label, key in CONCERT_DETAILS if c.get(key)
            )
            if times:
                st.caption(times)
            if c.get("notes"):
                st.caption(c["notes"])
            if c.get("venueMapUrl"):
                st.markdown(f"[📍 Map]({c['venueMapUrl']})")
            for entry in c["checklist"]:
                checked = st.checkbox(
                    entry["name"], value=entry["checked"], key=f"cl_{c['id']}_{entry['id']}"
                )
                if checked != entry["checked"]:
                    _edit("POST", f"concerts/{c['id']}/checklist/{entry['id']}/toggle")
            with st.expander("✏️ Edit"):
                concert_form(f"edit_concert_{c['id']}", start, c)
            if st.button("🗑 Delete", key=f"cc_del_{c['id']}"):
                _edit("DELETE", f"concerts/{c['id']}")

    concert_form("add_concert", start)


def shopping_form(key: str, existing: dict[str, Any] | None = None) -> None:
    """Add (``existing`` is None) or edit a shopping entry."""
    current = existing or {}
    priorities = [p.value for p in ShoppingPriority]
    with st.form(key, clear_on_submit=existing is None):
        form: dict[str, Any] = {"name": st.text_input("Item *", value=current.get("name", ""))}
        col_price, col_qty, col_cur = st.columns(3)
        form["price"] = col_price.number_input(
            "Price", min_value=0.0, step=100.0, value=float(current.get("price", 0))
        )
        form["quantity"] = col_qty.number_input(
            "Qty", min_value=1, step=1, value=int(current.get("quantity", 1))
        )
        form["currency"] = col_cur.selectbox(
            "Currency",
            options=CURRENCIES,
            index=CURRENCIES.index(current.get("currency", CURRENCIES[0])),
        )
        form["priority"] = st.selectbox(
            "Priority",
            options=priorities,
            index=priorities.index(current.get("priority", priorities[0])),
        )
        form["date"] = st.date_input("Date", value=_date_or_none(current.get("date")))

        if st.form_submit_button("Save item" if existing else "Add item"):
            body = helpers.shopping_payload(form, existing)
            if existing:
                _edit("PUT", f"shopping/{existing['id']}", body)
            else:
                _edit("POST", "shopping", body)


def render_shopping_tab(trip: dict[str, Any]) -> None:
    for item in trip["shopping_list"]:
        col_check, col_del = st.columns([6, 1])
        label = (
            f"{item['name']} · {item['currency']} {helpers.format_amount(item['price'])}"
            f" × {item['quantity']} · {item['priority']}"
        )
        checked = col_check.checkbox(label, value=item["checked"], key=f"sh_{item['id']}")
        if checked != item["checked"]:
            _edit("POST", f"shopping/{item['id']}/toggle")
        if col_del.button("🗑", key=f"sh_del_{item['id']}"):
            _edit("DELETE", f"shopping/{item['id']}")
        with st.expander("✏️ Edit"):
            shopping_form(f"edit_shopping_{item['id']}", item)

    shopping_form("add_shopping")


def render_expenses_tab(trip: dict[str, Any]) -> None:
    view = helpers.build_expense_view(
        helpers.get_expenses(BACKEND_URL, st.session_state.token, trip["id"])
    )
    st.markdown("### 預算統計表 (已選項目)")
    for column, (currency, amount) in zip(st.columns(len(view["totals"])), view["totals"].items()):
        column.metric(f"Total {currency}", amount)

    for category in view["categories"]:
        st.markdown(f"#### {category['label']}")
        st.caption(" · ".join(f"{c} {a}" for c, a in category["totals"].items()) or "—")
        for row in category["rows"]:
            st.markdown(f"- {row}")


# =============================================================================
# MAIN
# =============================================================================
def render_trip(trip: dict[str, Any]) -> None:
    st.title(trip["title"])
    st.caption(helpers.trip_label(trip))

    with st.expander("✏️ Edit details"), st.form("edit_trip_form"):
        title = st.text_input("Title", value=trip["title"])
        city = st.text_input("Destination City", value=trip["trip_summary"]["city"])
        start = st.date_input("Start Date", value=date.fromisoformat(trip["startDate"]))
        end = st.date_input("End Date", value=date.fromisoformat(trip["endDate"]))
        vibe = st.text_input("Vibe", value=", ".join(trip["trip_summary"]["vibe"]))
        col_save, col_delete = st.columns(2)
        if col_save.form_submit_button("Save", type="primary"):
            try:
                helpers.update_itinerary(
                    BACKEND_URL,
                    st.session_state.token,
                    trip["id"],
                    helpers.trip_details_payload(title, city, start, end, vibe),
                )
                st.session_state.error = None
            except httpx.HTTPStatusError as e:
                _show_http_error(e)
            st.rerun()
        if col_delete.form_submit_button("Delete trip"):
            try:
                helpers.delete_itinerary(BACKEND_URL, st.session_state.token, trip["id"])
                st.session_state.selected_id = None
            except httpx.HTTPStatusError as e:
                _show_http_error(e)
            st.rerun()

    tabs = st.tabs(
        ["📅 行程", "🎒 行李", "🚆 交通", "🎤 演唱會", "🛍️ 購物", "💰 花費"]
    )
    renderers = (
        render_itinerary_tab,
        render_packing_tab,
        render_transport_tab,
        render_concert_tab,
        render_shopping_tab,
        render_expenses_tab,
    )
    for tab, render in zip(tabs, renderers):
        with tab:
            render(trip)


if st.session_state.token is None:
    render_login()
else:
    sort = st.sidebar.radio("Sort by", options=["date", "destination"], horizontal=True)
    try:
        trips = helpers.list_itineraries(BACKEND_URL, st.session_state.token, sort)
    except httpx.HTTPStatusError:
        # Session expired
        st.session_state.token = None
        st.rerun()

    render_sidebar(trips)

    if st.session_state.error:
        st.error(f"❌ {st.session_state.error}")

    selected = next((t for t in trips if t["id"] == st.session_state.selected_id), None)
    if selected is None:
        st.info("👈 Pick a trip or create a new one.")
    else:
        render_trip(selected)
