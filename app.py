"""
Library catalog - a server-rendered library catalog built with Flask and SQLAlchemy.

Features:
- Authors, genres, books and book copies with list/detail/create/update/delete pages
- Form validation (Flask-WTF) with every field error reported at once
- Deletes refused while other records still reference the target
- Case-insensitive unique genre names
- Book search by title or author, and Open Library summary prefill by ISBN
"""

import logging
import os
from datetime import date

import click
from flask import Flask, render_template, request
from flask_wtf import CSRFProtect
from werkzeug.exceptions import HTTPException

import errors
from config import settings
from data_models import Author, Book, BookInstance, Genre, db
from forms import AuthorData, BookData, BookInstanceData, GenreData
from routes import register_blueprints
from store import get_store, init_store

csrf = CSRFProtect()


def configure_logging(app):
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))


def register_error_handlers(app):
    def show_details():
        return app.config.get("ENVIRONMENT") != "production"

    @app.errorhandler(404)
    def page_not_found(e):
        message = e.description if show_details() else "Not found"
        return render_template("error.html", title="Not Found", status=404, message=message), 404

    @app.errorhandler(errors.NotFound)
    def record_not_found(e):
        message = str(e) if show_details() else "Not found"
        return render_template("error.html", title="Not Found", status=404, message=message), 404

    @app.errorhandler(Exception)
    def internal_error(e):
        if isinstance(e, HTTPException):
            return e
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        message = str(e) if show_details() else "Something went wrong."
        return render_template("error.html", title="Error", status=500, message=message), 500


def seed_sample_data(store):
    """
    Add a few authors, genres, books and copies (for dev only).
    """
    austen = store.create(Author, AuthorData("Jane", "Austen", date(1775, 12, 16), date(1817, 7, 18)))
    twain = store.create(Author, AuthorData("Mark", "Twain", date(1835, 11, 30), date(1910, 4, 21)))
    fiction = store.create(Genre, GenreData("Fiction"))
    satire = store.create(Genre, GenreData("Satire"))

    pride = store.create(Book, BookData(
        title="Pride and Prejudice",
        author=austen.id,
        summary="A classic novel of manners.",
        isbn="9780141439518",
        genre=[fiction.id],
    ))
    finn = store.create(Book, BookData(
        title="Adventures of Huckleberry Finn",
        author=twain.id,
        summary="A classic American novel.",
        isbn="9780486280615",
        genre=[fiction.id, satire.id],
    ))

    store.create(BookInstance, BookInstanceData(pride.id, "Penguin Classics, 2003", "Available"))
    store.create(BookInstance, BookInstanceData(finn.id, "Dover, 1994", "Loaned", date.today()))


def register_commands(app):
    @app.cli.command("init-db")
    @click.option("--sample", is_flag=True, help="Also add sample records.")
    def init_db(sample):
        """Create the database tables."""
        db.create_all()
        if sample and get_store().count(Author) == 0:
            seed_sample_data(get_store())
            click.echo("Initialized database with sample data.")
        else:
            click.echo("Initialized database.")


def create_app(test_config=None):
    """
    Application factory. ``test_config`` overrides the environment settings.
    """
    app = Flask(__name__)
    app.config.from_mapping(settings.to_flask_config())
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(uri[len("sqlite:///"):]) or ".", exist_ok=True)

    db.init_app(app)
    csrf.init_app(app)
    init_store(app, db.session)

    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    @app.after_request
    def log_request(response):
        app.logger.info("%s %s %s", request.method, request.full_path.rstrip("?"), response.status_code)
        return response

    with app.app_context():
        db.create_all()

    return app


def shutdown(app):
    """
    Release database resources held by ``app``.
    """
    with app.app_context():
        get_store().close()
        db.engine.dispose()


if __name__ == "__main__":
    app = create_app()
    try:
        app.run(debug=app.config["DEBUG"])
    finally:
        shutdown(app)
