from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

env_path = Path(__file__).parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./files.db"
    UPLOAD_DIR: Path = Path("./uploads")
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    DB_POOL_SIZE: int = 5
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=env_path, extra='ignore')

    @field_validator('DATABASE_URL', mode='before')
    @classmethod
    def use_async_sqlite_driver(cls, v: str) -> str:
        # "sqlite:./files.db", "sqlite://files.db" and "sqlite:///abs/files.db"
        # all name a file path once "sqlite:" and one leading "//" are removed
        if isinstance(v, str) and v.startswith("sqlite:") and not v.startswith("sqlite+"):
            path = v[len("sqlite:"):]
            if path.startswith("//"):
                path = path[2:]
            return f"sqlite+aiosqlite:///{path}"
        return v

settings = Settings()
