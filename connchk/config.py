import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # No per-target timeout exists; these bound every probe of a run.
    TCP_TIMEOUT_SECONDS: float = float(os.getenv("CONNCHK_TCP_TIMEOUT_SECONDS", "5"))
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("CONNCHK_HTTP_TIMEOUT_SECONDS", "10"))
    HTTP_CONNECT_TIMEOUT_SECONDS: float = float(
        os.getenv("CONNCHK_HTTP_CONNECT_TIMEOUT_SECONDS") or HTTP_TIMEOUT_SECONDS
    )
    HTTP_DETAIL_CHARS: int = int(os.getenv("CONNCHK_HTTP_DETAIL_CHARS", 240))
    LOG_LEVEL: str = os.getenv("CONNCHK_LOG_LEVEL", "WARNING")


settings = Settings()
