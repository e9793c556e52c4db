"""Streamlit dashboard for the Travel Reservation System."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st

from travel_reservations.utils.config import get_settings

# ==========================================
# Configuration & Constants
# ==========================================
API_BASE_URL = get_settings().api_base_url

st.set_page_config(
    page_title="Travel Reservations",
    page_icon="✈️",
    layout="wide",
)


# ==========================================
# API Helper Functions
# ==========================================
def _headers() -> Dict[str, str]:
    token = st.session_state.get("access_token")
    return {"Authorization": f"Bearer {token}"} if token else {}


def _error_message(response: requests.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text
    if isinstance(detail, dict):
        return detail.get("message", str(detail))
    return str(detail)


def api_call(method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Optional[Any]:
    """Call the backend and surface failures in the page instead of raising."""
    try:
        response = requests.request(
            method,
            f"{API_BASE_URL}{path}",
            json=payload,
            headers=_headers(),
            timeout=5,
        )
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None
    if response.status_code >= 400:
        st.error(f"{response.status_code}: {_error_message(response)}")
        return None
    if response.status_code == 204 or not response.content:
        return {}
    return response.json()


def show_table(rows: List[Dict[str, Any]], empty_message: str) -> None:
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True)
    else:
        st.info(empty_message)


# ==========================================
# UI Page Functions
# ==========================================
def render_login_page() -> None:
    st.header("🔐 Sign in")
    login_tab, register_tab = st.tabs(["Login", "Register"])

    with login_tab:
        username = st.text_input("Username", key="login_username")
        password = st.text_input("Password", type="password", key="login_password")
        if st.button("Login", type="primary"):
            result = api_call("POST", "/login", {"username": username, "password": password})
            if result:
                st.session_state["access_token"] = result["access_token"]
                st.session_state["username"] = result["username"]
                st.session_state["is_admin"] = result["is_admin"]
                st.rerun()

    with register_tab:
        new_username = st.text_input("Choose a username", key="register_username")
        new_password = st.text_input("Choose a password", type="password", key="register_password")
        if st.button("Create account"):
            result = api_call(
                "POST",
                "/register",
                {"username": new_username, "password": new_password},
            )
            if result:
                st.success(f"Account {result['username']} created. You can now log in.")


def render_customer_page() -> None:
    st.header(f"🧳 Welcome, {st.session_state['username']}")

    recommendation = api_call("GET", "/recommendation")
    if recommendation:
        st.info(recommendation["message"])

    flights = api_call("GET", "/flights") or []
    hotels = api_call("GET", "/hotels") or []

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Flights")
        show_table(flights, "No flights available.")
        flight_ids = [row["id"] for row in flights if row["seats_available"] > 0]
        if flight_ids:
            flight_id = st.selectbox("Flight to reserve", flight_ids)
            if st.button("Reserve flight", type="primary"):
                result = api_call(
                    "POST",
                    "/reservations",
                    {"resource_kind": "Flight", "resource_id": flight_id},
                )
                if result:
                    st.success(f"Flight reservation made. Reservation ID: {result['id']}")
    with col2:
        st.subheader("Hotels")
        show_table(hotels, "No hotels available.")
        hotel_ids = [row["id"] for row in hotels if row["rooms_available"] > 0]
        if hotel_ids:
            hotel_id = st.selectbox("Hotel to reserve", hotel_ids)
            if st.button("Reserve hotel", type="primary"):
                result = api_call(
                    "POST",
                    "/reservations",
                    {"resource_kind": "Hotel", "resource_id": hotel_id},
                )
                if result:
                    st.success(f"Hotel reservation made. Reservation ID: {result['id']}")

    st.subheader("My reservations")
    mine = api_call("GET", "/reservations/mine") or []
    show_table(mine, "No reservations found for this user.")
    approved = [row["id"] for row in mine if row["status"] == "Approved"]
    if approved:
        to_cancel = st.selectbox("Request cancellation for", approved)
        if st.button("Request cancellation"):
            if api_call("POST", f"/reservations/{to_cancel}/cancel"):
                st.success("Cancellation request submitted.")


def render_admin_reservations() -> None:
    notifications = api_call("GET", "/notifications") or {"pending": [], "cancel_requested": []}

    st.subheader("Pending approval")
    show_table(notifications["pending"], "No pending reservations.")
    pending_ids = [row["id"] for row in notifications["pending"]]
    if pending_ids:
        reservation_id = st.selectbox("Reservation", pending_ids, key="pending_select")
        approve_col, reject_col = st.columns(2)
        if approve_col.button("Approve", type="primary"):
            if api_call("POST", f"/reservations/{reservation_id}/approve"):
                st.success("Reservation approved.")
        if reject_col.button("Reject"):
            if api_call("POST", f"/reservations/{reservation_id}/reject"):
                st.warning("Reservation rejected.")

    st.subheader("Cancellation requests")
    show_table(notifications["cancel_requested"], "No cancellation requests.")
    cancel_ids = [row["id"] for row in notifications["cancel_requested"]]
    if cancel_ids:
        reservation_id = st.selectbox("Reservation", cancel_ids, key="cancel_select")
        confirm_col, deny_col = st.columns(2)
        if confirm_col.button("Confirm cancellation", type="primary"):
            if api_call("POST", f"/reservations/{reservation_id}/cancellation/confirm"):
                st.success("Cancellation approved.")
        if deny_col.button("Deny cancellation"):
            if api_call("POST", f"/reservations/{reservation_id}/cancellation/deny"):
                st.warning("Cancellation denied.")

    st.subheader("All reservations")
    show_table(api_call("GET", "/reservations") or [], "No reservations available.")
    if st.button("Write reservations report"):
        result = api_call("POST", "/report")
        if result:
            st.success(f"Report written to {result['path']} ({result['reservation_count']} rows)")


def render_admin_inventory() -> None:
    st.subheader("Flights")
    show_table(api_call("GET", "/flights") or [], "No flights available.")
    with st.form("flight_form"):
        st.write("Add or edit a flight")
        flight_id = st.number_input("Flight number", min_value=1, value=100)
        origin = st.text_input("Origin")
        destination = st.text_input("Destination")
        departure = st.text_input("Departure time")
        arrival = st.text_input("Arrival time")
        seats = st.number_input("Total seats", min_value=0, value=1)
        add_col, edit_col, delete_col = st.columns(3)
        add = add_col.form_submit_button("Add")
        edit = edit_col.form_submit_button("Update")
        delete = delete_col.form_submit_button("Delete")
    fields = {
        "origin": origin,
        "destination": destination,
        "departure_time": departure,
        "arrival_time": arrival,
        "total_seats": int(seats),
    }
    if add and api_call("POST", "/flights", {"id": int(flight_id), **fields}):
        st.success("Flight added.")
    if edit:
        changes = {key: value for key, value in fields.items() if value not in ("", None)}
        if api_call("PUT", f"/flights/{int(flight_id)}", changes) is not None:
            st.success("Flight updated.")
    if delete and api_call("DELETE", f"/flights/{int(flight_id)}") is not None:
        st.success("Flight deleted.")

    st.subheader("Hotels")
    show_table(api_call("GET", "/hotels") or [], "No hotels available.")
    with st.form("hotel_form"):
        st.write("Add or edit a hotel")
        hotel_id = st.number_input("Hotel ID", min_value=1, value=200)
        name = st.text_input("Name")
        location = st.text_input("Location")
        rooms = st.number_input("Total rooms", min_value=0, value=1)
        add_col, edit_col, delete_col = st.columns(3)
        add = add_col.form_submit_button("Add")
        edit = edit_col.form_submit_button("Update")
        delete = delete_col.form_submit_button("Delete")
    fields = {"name": name, "location": location, "total_rooms": int(rooms)}
    if add and api_call("POST", "/hotels", {"id": int(hotel_id), **fields}):
        st.success("Hotel added.")
    if edit:
        changes = {key: value for key, value in fields.items() if value not in ("", None)}
        if api_call("PUT", f"/hotels/{int(hotel_id)}", changes) is not None:
            st.success("Hotel updated.")
    if delete and api_call("DELETE", f"/hotels/{int(hotel_id)}") is not None:
        st.success("Hotel deleted.")


def render_admin_users() -> None:
    users = api_call("GET", "/users") or []
    show_table(users, "No users registered.")
    removable = [row["username"] for row in users if row["username"] != st.session_state["username"]]
    if removable:
        username = st.selectbox("User to delete", removable)
        if st.button("Delete user") and api_call("DELETE", f"/users/{username}") is not None:
            st.success(f"User {username} deleted.")


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Travel Reservations")
    st.sidebar.markdown("---")

    if "access_token" not in st.session_state:
        render_login_page()
        return

    st.sidebar.caption(f"Logged in as {st.session_state['username']}")
    if st.sidebar.button("Log out"):
        api_call("POST", "/logout")
        for key in ("access_token", "username", "is_admin"):
            st.session_state.pop(key, None)
        st.rerun()

    if not st.session_state.get("is_admin"):
        render_customer_page()
        return

    page = st.sidebar.radio(
        "Administration",
        ["Reservations", "Inventory", "Users"],
    )
    if page == "Reservations":
        render_admin_reservations()
    elif page == "Inventory":
        render_admin_inventory()
    elif page == "Users":
        render_admin_users()


if __name__ == "__main__":
    main()
