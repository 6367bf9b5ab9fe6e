"""
routes/bookinstances.py
Book copy pages: list, detail, create, delete, update.
"""

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

import assembly
from data_models import BookInstance
from errors import NotFound
from forms import BookInstanceForm
from integrity import IntegrityGuard
from store import get_store

bookinstances_bp = Blueprint('bookinstances', __name__, url_prefix='/catalog')


@bookinstances_bp.route("/bookinstances")
def bookinstance_list():
    instances = assembly.bookinstance_list(get_store())
    return render_template(
        "bookinstance_list.html", title="List of Book Copies", bookinstance_list=instances
    )


@bookinstances_bp.route("/bookinstance/<int:instance_id>")
def bookinstance_detail(instance_id):
    context = assembly.bookinstance_detail(get_store(), instance_id)
    if context is None:
        abort(404, description="Book copy not found")
    title = f"Copy: {context['bookinstance'].book.title}"
    return render_template("bookinstance_detail.html", title=title, **context)


@bookinstances_bp.route("/bookinstance/create", methods=["GET", "POST"])
def bookinstance_create():
    store = get_store()
    form = BookInstanceForm()
    if request.method == "GET" and request.args.get("book", "").isdigit():
        form.book.data = int(request.args["book"])

    context = assembly.bookinstance_form_context(store, form)

    if form.validate_on_submit():
        instance = store.create(BookInstance, form.to_data())
        flash("Book copy was added successfully.", "success")
        return redirect(instance.url)

    return render_template("bookinstance_form.html", title="Create Book Copy", **context)


@bookinstances_bp.route("/bookinstance/<int:instance_id>/delete", methods=["GET", "POST"])
def bookinstance_delete(instance_id):
    store = get_store()

    if request.method == "POST":
        try:
            IntegrityGuard(store).delete(BookInstance, instance_id)
        except NotFound:
            return redirect(url_for("bookinstances.bookinstance_list"))
        flash("Book copy was deleted successfully.", "success")
        return redirect(url_for("bookinstances.bookinstance_list"))

    context = assembly.bookinstance_detail(store, instance_id)
    if context is None:
        return redirect(url_for("bookinstances.bookinstance_list"))
    return render_template("bookinstance_delete.html", title="Delete Book Copy", **context)


@bookinstances_bp.route("/bookinstance/<int:instance_id>/update", methods=["GET", "POST"])
def bookinstance_update(instance_id):
    store = get_store()
    instance = store.find_by_id(BookInstance, instance_id)
    if instance is None:
        abort(404, description="Book copy not found")

    form = BookInstanceForm() if request.method == "POST" else BookInstanceForm.from_record(instance)
    context = assembly.bookinstance_form_context(store, form)

    if form.validate_on_submit():
        instance = store.update_by_id(BookInstance, instance_id, form.to_data())
        flash("Book copy was updated successfully.", "success")
        return redirect(instance.url)

    return render_template(
        "bookinstance_form.html", title="Edit Book Copy", bookinstance=instance, **context
    )
