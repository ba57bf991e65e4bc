"""Helper functions for UI - API client calls plus pure view builders."""

import base64
from datetime import date
from typing import Any

import httpx

CATEGORY_LABELS = {
    "transport": "交通",
    "concert": "演唱會",
    "shopping": "購物 (已購買)",
}


def get_auth_header(token: str | None) -> dict[str, str]:
    """Get auth header for API calls.

    Args:
        token: Session token from /auth/login, or None when signed out

    Returns:
        Header dict (empty when there is no token)
    """
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def _request(
    method: str,
    backend_url: str,
    path: str,
    token: str | None = None,
    json: Any = None,
    params: dict[str, Any] | None = None,
) -> Any:
    """Send one request and decode the JSON body.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.request(
        method,
        f"{backend_url}{path}",
        json=json,
        params=params,
        headers=get_auth_header(token),
        timeout=30.0,
    )
    response.raise_for_status()
    if response.status_code == 204 or not response.content:
        return None
    return response.json()


# --- Auth ---


def login(backend_url: str, username: str, password: str) -> dict[str, Any]:
    """Sign in and return the session (token, user_id, username, expires_at)."""
    result: dict[str, Any] = _request(
        "POST", backend_url, "/auth/login", json={"username": username, "password": password}
    )
    return result


def register(
    backend_url: str, username: str, password: str, question: str, answer: str
) -> dict[str, Any]:
    """Create an account; the response is an open session."""
    result: dict[str, Any] = _request(
        "POST",
        backend_url,
        "/auth/register",
        json={
            "username": username,
            "password": password,
            "security_question": question,
            "security_answer": answer,
        },
    )
    return result


def logout(backend_url: str, token: str) -> None:
    _request("POST", backend_url, "/auth/logout", token=token)


def get_security_question(backend_url: str, username: str) -> str:
    result = _request(
        "GET", backend_url, "/auth/security-question", params={"username": username}
    )
    return str(result["question"])


def reset_password(backend_url: str, username: str, answer: str, new_password: str) -> None:
    _request(
        "POST",
        backend_url,
        "/auth/reset-password",
        json={"username": username, "security_answer": answer, "new_password": new_password},
    )


def change_password(backend_url: str, token: str, old_password: str, new_password: str) -> None:
    _request(
        "POST",
        backend_url,
        "/auth/change-password",
        token=token,
        json={"old_password": old_password, "new_password": new_password},
    )


def auth_error_message(error: httpx.HTTPStatusError) -> str:
    """User-facing text for a failed auth call.

    Args:
        error: Error raised by one of the auth calls

    Returns:
        Message naming remaining attempts or the lockout wait when known
    """
    try:
        detail = error.response.json().get("detail")
    except ValueError:
        detail = None

    status = error.response.status_code
    if status == 423 and isinstance(detail, dict):
        minutes = detail.get("retry_after_minutes", "?")
        return f"嘗試次數過多，請於 {minutes} 分鐘後再試。"
    if status == 401 and isinstance(detail, dict):
        remaining = detail.get("remaining_attempts", "?")
        return f"帳號或密碼錯誤 (剩餘嘗試次數: {remaining})"
    if isinstance(detail, str):
        return detail
    return f"Request failed ({status})"


# --- Itineraries ---


def list_itineraries(backend_url: str, token: str, sort: str = "date") -> list[dict[str, Any]]:
    """Caller's trips, sorted by ``date`` or ``destination``."""
    result = _request("GET", backend_url, "/itineraries", token=token, params={"sort": sort})
    itineraries: list[dict[str, Any]] = result["itineraries"]
    return itineraries


def trip_details_payload(
    title: str, city: str, start: date, end: date, vibe_raw: str = ""
) -> dict[str, Any]:
    """Body for creating or editing a trip; ``vibe_raw`` is comma-separated."""
    return {
        "title": title,
        "city": city,
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "vibe": [v.strip() for v in vibe_raw.split(",") if v.strip()],
    }


def create_itinerary(backend_url: str, token: str, details: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = _request(
        "POST", backend_url, "/itineraries", token=token, json=details
    )
    return result


def update_itinerary(
    backend_url: str, token: str, itinerary_id: str, details: dict[str, Any]
) -> dict[str, Any]:
    result: dict[str, Any] = _request(
        "PUT", backend_url, f"/itineraries/{itinerary_id}", token=token, json=details
    )
    return result


def delete_itinerary(backend_url: str, token: str, itinerary_id: str) -> None:
    _request("DELETE", backend_url, f"/itineraries/{itinerary_id}", token=token)


def get_expenses(backend_url: str, token: str, itinerary_id: str) -> dict[str, Any]:
    result: dict[str, Any] = _request(
        "GET", backend_url, f"/itineraries/{itinerary_id}/expenses", token=token
    )
    return result


def edit_section(
    backend_url: str,
    token: str,
    itinerary_id: str,
    method: str,
    path: str,
    json: Any = None,
) -> dict[str, Any]:
    """Call a section route (e.g. ``POST packing``) and return the updated trip."""
    result: dict[str, Any] = _request(
        method, backend_url, f"/itineraries/{itinerary_id}/{path}", token=token, json=json
    )
    return result


# --- View builders ---


def format_amount(amount: float) -> str:
    """Thousands separators; decimals only when non-zero."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def build_expense_view(summary: dict[str, Any]) -> dict[str, Any]:
    """Flatten an expense summary for display.

    Args:
        summary: ExpenseSummary JSON from /itineraries/{id}/expenses

    Returns:
        Dict with ``totals`` (currency -> formatted amount) and ``categories``
        (label, per-currency totals with zero buckets dropped, item rows)
    """
    totals = {currency: format_amount(amount) for currency, amount in summary["totals"].items()}

    categories = []
    for category in summary["categories"]:
        categories.append(
            {
                "label": CATEGORY_LABELS.get(category["category"], category["category"]),
                "totals": {
                    currency: format_amount(amount)
                    for currency, amount in category["totals"].items()
                    if amount > 0
                },
                "rows": [
                    f"{item['date']} · {item['name']} · "
                    f"{item['currency']} {format_amount(item['amount'])}"
                    for item in category["items"]
                ],
            }
        )

    return {"totals": totals, "categories": categories}


def build_day_view(itinerary: dict[str, Any]) -> list[dict[str, Any]]:
    """Day cards: heading plus activity lines, in day order.

    Args:
        itinerary: Itinerary JSON as returned by the API

    Returns:
        List of dicts with ``id``, ``day``, ``theme``, ``heading`` and ``activities``
    """
    days = []
    for plan in itinerary.get("daily_itinerary", []):
        heading = f"Day {plan['day']}"
        if plan.get("date"):
            heading += f" · {plan['date']}"
        if plan.get("theme"):
            heading += f" · {plan['theme']}"

        activities = []
        for activity in plan.get("activities", []):
            line = activity["location"]
            if activity.get("time_slot"):
                line = f"{activity['time_slot']} {line}"
            activities.append(
                {
                    "id": activity["id"],
                    "line": line,
                    "location": activity["location"],
                    "time_slot": activity.get("time_slot", ""),
                    "notes": activity.get("notes", ""),
                    "map_url": activity.get("mapUrl"),
                }
            )

        days.append(
            {
                "id": plan["id"],
                "day": plan["day"],
                "theme": plan.get("theme", ""),
                "heading": heading,
                "activities": activities,
            }
        )
    return days


def trip_label(itinerary: dict[str, Any]) -> str:
    """One-line list entry: title, city and date range."""
    summary = itinerary["trip_summary"]
    return (
        f"{itinerary['title']} · {summary['city']} · "
        f"{itinerary['startDate']} → {itinerary['endDate']} ({summary['total_days']} days)"
    )


def image_to_data_url(data: bytes, mime_type: str) -> str:
    """Inline an uploaded image as a base64 data URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


# --- Section payloads ---

SCHEDULED_FIELDS = ("date", "time", "arrivalTime")
FLIGHT_FIELDS = ("flightNumber", "gate", "seat", "terminal", "arrivalTerminal")
RENTAL_FIELDS = (
    "pickupLocation",
    "pickupDate",
    "pickupTime",
    "returnLocation",
    "returnDate",
    "returnTime",
    "isSameLocation",
)
RENTAL_MODE = "租車"
FLIGHT_MODE = "飛機"


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


def transport_payload(
    mode: str, form: dict[str, Any], existing: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Booking body for ``mode`` built from form values.

    Only the fields that belong to the mode are sent. Attached images are kept
    from ``existing`` because saving a booking replaces it whole.
    """
    if mode == RENTAL_MODE:
        keys: tuple[str, ...] = RENTAL_FIELDS
    elif mode == FLIGHT_MODE:
        keys = SCHEDULED_FIELDS + FLIGHT_FIELDS
    else:
        keys = SCHEDULED_FIELDS

    body: dict[str, Any] = {
        "type": mode,
        "detail": form.get("detail", ""),
        "cost": form.get("cost", 0),
        "currency": form.get("currency", "TWD"),
        "images": list(existing["images"]) if existing else [],
    }
    for key in keys:
        if key in form:
            body[key] = _iso(form[key])
    return body


def concert_payload(
    form: dict[str, Any], existing: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Concert body; an edit keeps the existing checklist and image."""
    body = {key: _iso(value) for key, value in form.items()}
    if existing:
        body["checklist"] = existing["checklist"]
        body["imageUrl"] = existing.get("imageUrl")
    return body


def shopping_payload(
    form: dict[str, Any], existing: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Shopping body; an edit keeps the bought flag and links."""
    body = {key: _iso(value) for key, value in form.items()}
    body["quantity"] = int(body.get("quantity", 1))
    if existing:
        for key in ("checked", "imageUrl", "locationUrl", "link"):
            body.setdefault(key, existing.get(key))
    return body


def move_targets(itinerary: dict[str, Any], current_day: int) -> list[int]:
    """Day numbers an activity on ``current_day`` can move to."""
    return [
        plan["day"] for plan in itinerary.get("daily_itinerary", []) if plan["day"] != current_day
    ]
