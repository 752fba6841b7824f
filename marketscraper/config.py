"""設定モジュール — 環境変数・定数定義."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# .env は実行ディレクトリに配置
load_dotenv(Path.cwd() / ".env")

# --- 検索 ---
DEFAULT_BASE_URL = "https://www.amazon.com/"
SORT_ORDER = "review-rank"

# --- User-Agent ---
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36"
)

HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Upgrade-Insecure-Requests": "1",
}

# --- リクエスト設定 (デフォルト値) ---
DEFAULT_MAX_PAGES = 3
DEFAULT_REQUEST_TIMEOUT = 25.0  # 秒
DEFAULT_MAX_REDIRECTS = 5

# --- ログ ---
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))  # 相対パスは実行ディレクトリ基準


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """起動時に一度だけ組み立てる実行時設定.

    検索処理・ページ取得にはこの値を引数で渡す。グローバルな可変状態は持たない。
    """

    base_url: str = DEFAULT_BASE_URL
    max_pages: int = DEFAULT_MAX_PAGES
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    debug: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """環境変数から設定を読み込む.

        不正な数値はデフォルト値にフォールバックする。
        """
        return cls(
            base_url=os.getenv("SCRAPING_URI") or DEFAULT_BASE_URL,
            max_pages=_env_int("MAX_PAGES", DEFAULT_MAX_PAGES, minimum=1),
            request_timeout=_env_float("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            max_redirects=_env_int("MAX_REDIRECTS", DEFAULT_MAX_REDIRECTS),
            debug=_env_bool("DEBUG"),
        )
