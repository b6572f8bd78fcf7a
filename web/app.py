"""Flask web application for recording vehicle service entries."""

import logging
from datetime import date

from flask import (
    Flask,
    current_app,
    flash,
    make_response,
    redirect,
    render_template,
    request,
    url_for,
)

from servicelog import (
    HISTORY,
    ServiceEntryController,
    ServiceEntryForm,
    StoreError,
    entries_from_snapshot,
    is_same_day,
    normalize_vehicle_number,
    to_cost,
    to_form_date,
)
from servicelog.config import Settings, build_store
from servicelog.logging_config import setup_logging

logger = logging.getLogger(__name__)

settings = Settings.from_env()
setup_logging(settings.log_level, settings.log_file)

app = Flask(__name__)
app.secret_key = settings.secret_key
app.config["SHOP_NAME"] = settings.shop_name


def get_store():
    """Store configured for this app, built from settings on first use."""
    store = current_app.config.get("SERVICE_STORE")
    if store is None:
        store = build_store(settings)
        current_app.config["SERVICE_STORE"] = store
    return store


def format_cost(cost):
    """Format a cost as rupees: ₹750 or ₹99.50."""
    value = to_cost(cost)
    if isinstance(value, int):
        return f"₹{value:,}"
    return f"₹{value:,.2f}"


def format_date(timestamp):
    """Format a stored timestamp as its service day."""
    if not timestamp:
        return "—"
    try:
        return to_form_date(timestamp)
    except ValueError:
        logger.warning("Unreadable service date %r", timestamp)
        return "—"


def format_km(km):
    """Format a kilometer reading with comma separator."""
    if km is None or km == "":
        return "—"
    return f"{to_cost(km):,} km"


app.jinja_env.filters["format_cost"] = format_cost
app.jinja_env.filters["format_km"] = format_km
app.jinja_env.filters["format_date"] = format_date


@app.context_processor
def inject_shop_name():
    return {"shop_name": current_app.config["SHOP_NAME"]}


def notify(outcome):
    """Flash an outcome's notifications."""
    for note in outcome.notifications:
        flash(note.as_dict(), note.category)


def redirect_to(target: str, vehicle_number: str):
    """Redirect to a controller target, via HX-Redirect for HTMX requests."""
    if target == HISTORY:
        location = url_for("service_history", vehicle_number=vehicle_number)
    else:
        location = url_for("index")
    if request.headers.get("HX-Request"):
        response = make_response("", 200)
        response.headers["HX-Redirect"] = location
        return response
    return redirect(location)


def render_entry_page(controller: ServiceEntryController, errors=None):
    """Full page, or just the form partial when HTMX asked for it."""
    template = (
        "partials/entry_form.html"
        if request.headers.get("HX-Request")
        else "service_entry.html"
    )
    return render_template(
        template,
        controller=controller,
        form=controller.form,
        errors=errors or {},
        edit_id=controller.edit_id,
    )


@app.route("/")
def index():
    """Home page: pick a vehicle by number."""
    return render_template("index.html")


@app.route("/service-entry")
def open_service_entry():
    """Redirect the home page's vehicle number form to the entry page."""
    vehicle_number = normalize_vehicle_number(request.args.get("number", ""))
    if not vehicle_number:
        flash({"title": "Error", "description": "Please enter a vehicle number"}, "error")
        return redirect(url_for("index"))
    return redirect(url_for("service_entry", vehicle_number=vehicle_number))


@app.route("/service-entry/<vehicle_number>", methods=["GET"])
def service_entry(vehicle_number: str):
    """New or same-day edit service entry form."""
    controller = ServiceEntryController(
        get_store(), vehicle_number, edit_id=request.args.get("edit")
    )
    outcome = controller.mount()
    if outcome is not None:
        notify(outcome)
        if outcome.redirect:
            return redirect_to(outcome.redirect, controller.vehicle_number)
    return render_entry_page(controller)


@app.route("/service-entry/<vehicle_number>", methods=["POST"])
def save_service_entry(vehicle_number: str):
    """
    Handle the entry form.

    ``action`` selects what happens:
    - add_part / remove_part:<i> / add_item / remove_item:<i>: edit the
      line items and re-render the form
    - save (default): validate and persist
    """
    controller = ServiceEntryController(
        get_store(), vehicle_number, edit_id=request.args.get("edit")
    )
    controller.check_existing_records()
    form = ServiceEntryForm.from_form_data(controller.vehicle_number, request.form)
    controller.form = form

    action = request.form.get("action", "save")
    name, _, index = action.partition(":")
    if name in ("add_part", "remove_part", "add_item", "remove_item"):
        try:
            position = int(index) if index else -1
        except ValueError:
            position = -1
        if name == "add_part":
            form.add_spare_part()
        elif name == "remove_part":
            form.remove_spare_part(position)
        elif name == "add_item":
            form.add_service_item()
        else:
            form.remove_service_item(position)
        return render_entry_page(controller)

    outcome = controller.submit(form)
    notify(outcome)
    if outcome.redirect:
        return redirect_to(outcome.redirect, controller.vehicle_number)
    return render_entry_page(controller, errors=outcome.errors)


@app.route("/service-entry/<vehicle_number>/totals", methods=["POST"])
def service_totals(vehicle_number: str):
    """HTMX partial: totals recomputed from the posted line items."""
    form = ServiceEntryForm.from_form_data(
        normalize_vehicle_number(vehicle_number), request.form
    )
    return render_template("partials/totals.html", form=form)


@app.route("/service-history/<vehicle_number>")
def service_history(vehicle_number: str):
    """Read-only service history for a vehicle, newest first."""
    vehicle_number = normalize_vehicle_number(vehicle_number)
    try:
        entries = entries_from_snapshot(get_store().fetch_all(vehicle_number))
    except StoreError as e:
        logger.error("Error loading service history for %s: %s", vehicle_number, e)
        flash({"title": "Error", "description": "Failed to load service history."}, "error")
        entries = []

    today = date.today()
    rows = [
        {"entry": entry, "editable": is_same_day(entry.date, today)}
        for entry in entries
    ]
    grand_total = sum(to_cost(entry.total_cost) for entry in entries)

    return render_template(
        "history.html",
        vehicle_number=vehicle_number,
        rows=rows,
        grand_total=grand_total,
    )


if __name__ == "__main__":
    # Run with debug mode for development
    app.run(debug=True, host="0.0.0.0", port=5001)
