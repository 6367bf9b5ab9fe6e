from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import validates

db = SQLAlchemy()

STATUS_CHOICES = ("Available", "Maintenance", "Loaned", "Reserved")
DEFAULT_STATUS = "Maintenance"


def format_date(value):
    """
    Format a date for display ('Jan 05, 1900'), or return '' when unknown.
    """
    return value.strftime("%b %d, %Y") if value else ""


book_genres = db.Table(
    "book_genres",
    db.Column("book_id", db.Integer, db.ForeignKey("books.id"), primary_key=True),
    db.Column("genre_id", db.Integer, db.ForeignKey("genres.id"), primary_key=True),
)


class Author(db.Model):
    """
    Author model storing name parts and optional life dates.
    """
    __tablename__ = 'authors'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    first_name = db.Column(db.String(100), nullable=False)
    family_name = db.Column(db.String(100), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    date_of_death = db.Column(db.Date, nullable=True)

    books = db.relationship("Book", back_populates="author")

    @property
    def name(self):
        return f"{self.family_name}, {self.first_name}"

    @property
    def lifespan(self):
        """
        'Jan 01, 1900 - Mar 03, 1970'. A missing birth date shows as '?',
        a missing death date is left blank; both missing gives 'Unknown'.
        """
        if not self.date_of_birth and not self.date_of_death:
            return "Unknown"
        birth = format_date(self.date_of_birth) or "?"
        return f"{birth} - {format_date(self.date_of_death)}".rstrip()

    @property
    def url(self):
        return f"/catalog/author/{self.id}"

    def __repr__(self):
        return f"Author(id = {self.id}, name = {self.name})"

    def __str__(self):
        return self.name


def genre_name_key(name):
    """
    Comparison key for genre names: case-folded, inner whitespace collapsed.
    'Éthique' and ' éthique' share a key.
    """
    return " ".join(name.split()).casefold() if name else name


class Genre(db.Model):
    """
    Genre model. Names are unique ignoring case, compared through name_key.
    """
    __tablename__ = 'genres'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    name_key = db.Column(db.String(300), nullable=False, unique=True)

    books = db.relationship("Book", secondary=book_genres, back_populates="genre")

    @validates("name")
    def _set_name_key(self, key, name):
        self.name_key = genre_name_key(name)
        return name

    @property
    def url(self):
        return f"/catalog/genre/{self.id}"

    def __repr__(self):
        return f"<Genre id={self.id} name='{self.name}'>"

    def __str__(self):
        return self.name


class Book(db.Model):
    """
    Book model storing title, summary, ISBN, its author and its genres.
    """
    __tablename__ = 'books'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(200), nullable=False)
    summary = db.Column(db.Text, nullable=False)
    isbn = db.Column(db.String(20), nullable=False)

    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"), nullable=False)

    author = db.relationship("Author", back_populates="books")
    genre = db.relationship(
        "Genre",
        secondary=book_genres,
        back_populates="books",
        order_by="Genre.name",
    )
    instances = db.relationship("BookInstance", back_populates="book")

    @property
    def url(self):
        return f"/catalog/book/{self.id}"

    def __repr__(self):
        return f"<Book id={self.id} title='{self.title}'>"

    def __str__(self):
        return self.title


class BookInstance(db.Model):
    """
    A physical copy of a book.
    """
    __tablename__ = 'book_instances'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False)
    imprint = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=DEFAULT_STATUS)
    due_back = db.Column(db.Date, nullable=True)

    book = db.relationship("Book", back_populates="instances")

    @property
    def due_back_formatted(self):
        return format_date(self.due_back)

    @property
    def url(self):
        return f"/catalog/bookinstance/{self.id}"

    def __repr__(self):
        return f"<BookInstance id={self.id} book_id={self.book_id} status='{self.status}'>"

    def __str__(self):
        return f"{self.imprint} ({self.status})"
