# dashboard.py — staff dashboard (mock numbers until the DMS feed exists)
from __future__ import annotations

import copy
from typing import Any, Dict

from flask import Blueprint, g, jsonify

from .auth import api_login_required, login_required

dashboard_bp = Blueprint("dashboard_bp", __name__)

METRICS = {
    "totalSales": 179,
    "monthlyRevenue": 2400000,
    "serviceAppointments": 255,
    "customerSatisfaction": 92,
    "inventoryCount": 342,
    "leadConversions": 68,
}

METRIC_CARDS = (
    {"label": "Monthly Sales", "key": "totalSales", "trend": "+8.2% from last month"},
    {"label": "Revenue", "key": "monthlyRevenue", "trend": "+12.5% from last month"},
    {"label": "Service Appointments", "key": "serviceAppointments", "trend": "+6.7% from last month"},
    {"label": "Customer Satisfaction", "key": "customerSatisfaction", "trend": "+2.1% from last month"},
    {"label": "Inventory", "key": "inventoryCount", "trend": "vehicles in stock"},
    {"label": "Lead Conversion", "key": "leadConversions", "trend": "+5.3% from last month"},
)

RECENT_ACTIVITY = (
    {"text": "New Chevrolet Silverado sold", "when": "2 hours ago"},
    {"text": "Service appointment scheduled", "when": "3 hours ago"},
    {"text": "New customer lead from website", "when": "5 hours ago"},
)

SALES_PERFORMANCE = {
    "soldToday": {"count": 12, "trend": "+20% vs yesterday"},
    "soldThisWeek": {"count": 67, "trend": "+15% vs last week"},
    # bar heights as percent of the best day
    "dailySales": [
        {"day": "Mon", "percent": 60},
        {"day": "Tue", "percent": 80},
        {"day": "Wed", "percent": 70},
        {"day": "Thu", "percent": 100},
        {"day": "Fri", "percent": 90},
        {"day": "Sat", "percent": 40},
        {"day": "Sun", "percent": 40},
    ],
    "team": [
        {"name": "Jake Miller", "role": "Senior Sales", "carsSold": 5, "note": "Top Performer"},
        {"name": "Sarah Thompson", "role": "Sales Associate", "carsSold": 3, "note": "Today"},
        {"name": "Robert Davis", "role": "Sales Manager", "carsSold": 2, "note": "Today"},
        {"name": "Mike Wilson", "role": "Sales Associate", "carsSold": 2, "note": "Today"},
    ],
}


def dashboard_data() -> Dict[str, Any]:
    return {
        "metrics": dict(METRICS),
        "cards": [{**card, "value": METRICS[card["key"]]} for card in METRIC_CARDS],
        "recentActivity": [dict(a) for a in RECENT_ACTIVITY],
        "salesPerformance": copy.deepcopy(SALES_PERFORMANCE),
    }


@dashboard_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard_page():
    return jsonify({"user": g.user, **dashboard_data()})


@dashboard_bp.route("/api/dashboard/metrics", methods=["GET"])
@api_login_required
def dashboard_metrics():
    return jsonify({"user": g.user, **dashboard_data()})
