import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Database
    database_url: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(basedir, 'data/library.sqlite')}"
    )

    # Application
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-key")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = _flag("DEBUG", "False")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Open Library summary lookup
    openlibrary_timeout: float = float(os.getenv("OPENLIBRARY_TIMEOUT", "8"))
    enable_summary_lookup: bool = _flag("ENABLE_SUMMARY_LOOKUP", "True")

    def to_flask_config(self) -> dict:
        """
        Map settings onto the Flask config keys the app reads.
        """
        return {
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "SECRET_KEY": self.secret_key,
            "ENVIRONMENT": self.environment,
            "DEBUG": self.debug,
            "LOG_LEVEL": self.log_level,
            "OPENLIBRARY_TIMEOUT": self.openlibrary_timeout,
            "ENABLE_SUMMARY_LOOKUP": self.enable_summary_lookup,
        }


settings = Settings()
