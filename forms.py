"""
Form validation for the catalog.

Each form trims its input, checks it, and on success produces a typed
payload for the store. Free text is sanitized with bleach when the payload
is built, so a form re-rendered after an error shows what was typed.
"""

import html
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import bleach
from flask_wtf import FlaskForm
from wtforms import DateField, SelectField, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Regexp, ValidationError
from wtforms.validators import Optional as OptionalValidator
from wtforms.widgets import CheckboxInput, ListWidget

from data_models import DEFAULT_STATUS, STATUS_CHOICES

ALPHANUMERIC = r"^[A-Za-z0-9]+$"


def strip_whitespace(value):
    return value.strip() if isinstance(value, str) else value


def sanitize(value):
    """
    Strip markup and escape markup-significant characters.
    """
    if not value:
        return value
    return bleach.clean(value, tags=set(), strip=True)


def unsanitize(value):
    """
    Undo sanitize() escaping so stored text can be edited as typed.
    """
    return html.unescape(value) if value else value


class SanitizedLength:
    """
    Maximum length of the value as stored, i.e. after sanitize() has
    escaped it ('&' becomes '&amp;').
    """

    def __init__(self, max, message=None):
        self.max = max
        self.message = message

    def __call__(self, form, field):
        if field.data and len(sanitize(field.data)) > self.max:
            message = self.message or field.gettext(
                "Field cannot be longer than %(max)d characters."
            ) % {"max": self.max}
            raise ValidationError(message)


class IsoDateField(DateField):
    """
    YYYY-MM-DD date field with a configurable message for unparseable input.
    """

    def __init__(self, label=None, validators=None, invalid_message=None, **kwargs):
        super().__init__(label, validators, format="%Y-%m-%d", **kwargs)
        self.invalid_message = invalid_message

    def process_formdata(self, valuelist):
        try:
            super().process_formdata(valuelist)
        except ValueError:
            self.data = None
            raise ValueError(self.invalid_message or self.gettext("Not a valid date value."))


# --- Payloads ---

@dataclass
class AuthorData:
    first_name: str
    family_name: str
    date_of_birth: Optional[date] = None
    date_of_death: Optional[date] = None


@dataclass
class GenreData:
    name: str


@dataclass
class BookData:
    title: str
    author: int
    summary: str
    isbn: str
    genre: List[int] = field(default_factory=list)


@dataclass
class BookInstanceData:
    book: int
    imprint: str
    status: str = DEFAULT_STATUS
    due_back: Optional[date] = None


# --- Forms ---

class AuthorForm(FlaskForm):
    first_name = StringField(
        "First name",
        filters=[strip_whitespace],
        validators=[
            DataRequired("First name is required."),
            SanitizedLength(100, message="First name must be at most 100 characters."),
            Regexp(ALPHANUMERIC, message="First name must be alphanumeric."),
        ],
    )
    family_name = StringField(
        "Family name",
        filters=[strip_whitespace],
        validators=[
            DataRequired("Family name is required."),
            SanitizedLength(100, message="Family name must be at most 100 characters."),
            Regexp(ALPHANUMERIC, message="Family name must be alphanumeric."),
        ],
    )
    date_of_birth = IsoDateField(
        "Date of birth",
        validators=[OptionalValidator()],
        invalid_message="Invalid date of birth.",
    )
    date_of_death = IsoDateField(
        "Date of death",
        validators=[OptionalValidator()],
        invalid_message="Invalid date of death.",
    )

    def validate_date_of_death(self, field):
        if field.data and self.date_of_birth.data and field.data < self.date_of_birth.data:
            raise ValidationError("Date of death must not be before date of birth.")

    @classmethod
    def from_record(cls, author):
        return cls(obj=author)

    def to_data(self) -> AuthorData:
        return AuthorData(
            first_name=sanitize(self.first_name.data),
            family_name=sanitize(self.family_name.data),
            date_of_birth=self.date_of_birth.data,
            date_of_death=self.date_of_death.data,
        )


class GenreForm(FlaskForm):
    name = StringField(
        "Genre name",
        filters=[strip_whitespace],
        validators=[
            Length(min=3, message="Genre name requires at least 3 characters."),
            SanitizedLength(100, message="Genre name must be at most 100 characters."),
        ],
    )

    @classmethod
    def from_record(cls, genre):
        return cls(data={"name": unsanitize(genre.name)})

    def to_data(self) -> GenreData:
        return GenreData(name=sanitize(self.name.data))


class BookForm(FlaskForm):
    title = StringField(
        "Title",
        filters=[strip_whitespace],
        validators=[DataRequired("Title required."), SanitizedLength(200)],
    )
    author = SelectField("Author", coerce=int, validators=[DataRequired("Author required.")])
    summary = TextAreaField(
        "Summary",
        filters=[strip_whitespace],
        validators=[DataRequired("Summary required.")],
    )
    isbn = StringField(
        "ISBN",
        filters=[strip_whitespace],
        validators=[DataRequired("ISBN required."), SanitizedLength(20)],
    )
    # Always decoded as a list, even when a single box is ticked.
    genre = SelectMultipleField(
        "Genre",
        coerce=int,
        widget=ListWidget(prefix_label=False),
        option_widget=CheckboxInput(),
    )

    def with_choices(self, authors, genres):
        """
        Load the author dropdown and genre checkboxes. Submitted ids are
        validated against these.
        """
        self.author.choices = [(a.id, a.name) for a in authors]
        self.genre.choices = [(g.id, g.name) for g in genres]
        return self

    @classmethod
    def from_record(cls, book):
        return cls(data={
            "title": unsanitize(book.title),
            "author": book.author_id,
            "summary": unsanitize(book.summary),
            "isbn": unsanitize(book.isbn),
            "genre": [g.id for g in book.genre],
        })

    def to_data(self) -> BookData:
        return BookData(
            title=sanitize(self.title.data),
            author=self.author.data,
            summary=sanitize(self.summary.data),
            isbn=sanitize(self.isbn.data),
            genre=list(self.genre.data or []),
        )


class BookInstanceForm(FlaskForm):
    book = SelectField(
        "Book",
        coerce=int,
        validators=[DataRequired("Selection of a book is required.")],
    )
    imprint = StringField(
        "Imprint",
        filters=[strip_whitespace],
        validators=[DataRequired("Imprint is required."), SanitizedLength(200)],
    )
    status = SelectField(
        "Status",
        choices=[(s, s) for s in STATUS_CHOICES],
        default=DEFAULT_STATUS,
    )
    due_back = IsoDateField(
        "Date when book available",
        validators=[OptionalValidator()],
        invalid_message="Invalid due date.",
    )

    def with_choices(self, books):
        self.book.choices = [(b.id, b.title) for b in books]
        return self

    @classmethod
    def from_record(cls, instance):
        return cls(data={
            "book": instance.book_id,
            "imprint": unsanitize(instance.imprint),
            "status": instance.status,
            "due_back": instance.due_back,
        })

    def to_data(self) -> BookInstanceData:
        return BookInstanceData(
            book=self.book.data,
            imprint=sanitize(self.imprint.data),
            status=self.status.data or DEFAULT_STATUS,
            due_back=self.due_back.data,
        )
