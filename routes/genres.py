"""
routes/genres.py
Genre pages: list, detail, create, delete, update.
"""

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

import assembly
from data_models import Genre, genre_name_key
from errors import DuplicateKeyError, IntegrityViolation, NotFound
from forms import GenreForm
from integrity import IntegrityGuard
from store import get_store

genres_bp = Blueprint('genres', __name__, url_prefix='/catalog')


def find_genre_by_name(store, name):
    """
    Case-insensitive lookup of a genre by name.
    """
    matches = store.find_all(Genre, Genre.name_key == genre_name_key(name))
    return matches[0] if matches else None


@genres_bp.route("/genres")
def genre_list():
    genres = get_store().find_all(Genre)
    return render_template("genre_list.html", title="List of Genres", genre_list=genres)


@genres_bp.route("/genre/<int:genre_id>")
def genre_detail(genre_id):
    context = assembly.genre_detail(get_store(), genre_id)
    if context is None:
        abort(404, description="Genre not found")
    return render_template("genre_detail.html", title="Genre Detail", **context)


@genres_bp.route("/genre/create", methods=["GET", "POST"])
def genre_create():
    """
    Create a genre. A name that already exists (ignoring case) redirects to
    the existing genre instead of creating a duplicate.
    """
    store = get_store()
    form = GenreForm()

    if form.validate_on_submit():
        data = form.to_data()
        existing = find_genre_by_name(store, data.name)
        if existing is not None:
            return redirect(existing.url)

        try:
            genre = store.create(Genre, data)
        except DuplicateKeyError:
            # Created by another request since the lookup above.
            existing = find_genre_by_name(store, data.name)
            if existing is None:
                raise
            return redirect(existing.url)

        flash(f"Genre '{form.name.data}' was added successfully.", "success")
        return redirect(genre.url)

    return render_template("genre_form.html", title="New Genre", form=form)


@genres_bp.route("/genre/<int:genre_id>/delete", methods=["GET", "POST"])
def genre_delete(genre_id):
    store = get_store()

    if request.method == "POST":
        try:
            IntegrityGuard(store).delete_genre(genre_id)
        except NotFound:
            return redirect(url_for("genres.genre_list"))
        except IntegrityViolation as exc:
            return render_template(
                "genre_delete.html",
                title="Cannot Delete Genre",
                genre=exc.record,
                genre_books=exc.dependents,
            ), 409
        flash("Genre was deleted successfully.", "success")
        return redirect(url_for("genres.genre_list"))

    context = assembly.genre_detail(store, genre_id)
    if context is None:
        return redirect(url_for("genres.genre_list"))
    return render_template("genre_delete.html", title="Delete Genre", **context)


@genres_bp.route("/genre/<int:genre_id>/update", methods=["GET", "POST"])
def genre_update(genre_id):
    store = get_store()
    genre = store.find_by_id(Genre, genre_id)
    if genre is None:
        abort(404, description="Genre not found")

    form = GenreForm() if request.method == "POST" else GenreForm.from_record(genre)

    if form.validate_on_submit():
        try:
            genre = store.update_by_id(Genre, genre_id, form.to_data())
        except DuplicateKeyError:
            form.name.errors.append("A genre with this name already exists.")
        else:
            flash(f"Genre '{form.name.data}' was updated successfully.", "success")
            return redirect(genre.url)

    return render_template("genre_form.html", title="Edit Genre", form=form, genre=genre)
