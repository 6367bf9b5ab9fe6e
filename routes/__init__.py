"""
Route blueprints for the catalog pages.
"""

from routes.authors import authors_bp
from routes.bookinstances import bookinstances_bp
from routes.books import books_bp
from routes.catalog import catalog_bp
from routes.genres import genres_bp


def register_blueprints(app):
    for blueprint in (catalog_bp, authors_bp, genres_bp, books_bp, bookinstances_bp):
        app.register_blueprint(blueprint)
