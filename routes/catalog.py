"""
routes/catalog.py
Catalog home page with record counts.
"""

from flask import Blueprint, redirect, render_template, url_for

import assembly
from store import get_store

catalog_bp = Blueprint('catalog', __name__)


@catalog_bp.route("/")
def root():
    return redirect(url_for("catalog.index"))


@catalog_bp.route("/catalog/")
def index():
    counts = assembly.dashboard_counts(get_store())
    return render_template("index.html", title="Library Home", **counts)
