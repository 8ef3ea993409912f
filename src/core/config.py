import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file into environment variables so os.getenv() works
load_dotenv()


class Settings(BaseSettings):
    app_name: str = "santari"

    env: str = "development"

    # Personal access token used for every GitHub API call
    GITHUB_KEY: str = os.getenv("GITHUB_KEY", "")

    TEMPORAL_SERVER_URL: str = os.getenv("TEMPORAL_SERVER_URL", "localhost:7233")
    TEMPORAL_NAMESPACE: str = os.getenv("TEMPORAL_NAMESPACE", "default")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class MissingCredentialsError(RuntimeError):
    """Raised at process start when the GitHub access token is not configured."""


def require_github_key(current: Settings | None = None) -> str:
    """
    Return the configured GitHub access token.

    Raises:
        MissingCredentialsError: If GITHUB_KEY is unset or empty
    """
    token = (current or settings).GITHUB_KEY
    if not token:
        raise MissingCredentialsError(
            "Github access token environment variable does not exist! "
            "Please create one at GITHUB_KEY"
        )
    return token


settings = Settings()
