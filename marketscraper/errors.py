"""例外定義."""

from __future__ import annotations


class ScraperError(Exception):
    """このパッケージが送出する例外の基底クラス."""


class InvalidRequest(ScraperError):
    """リクエストパラメータ不正（キーワード未指定など）."""


class FetchError(ScraperError):
    """ページ取得失敗（HTTP エラー・タイムアウト・接続失敗・リダイレクト超過）."""

    def __init__(self, url: str, cause: BaseException, status_code: int | None = None):
        self.url = url
        self.cause = cause
        self.status_code = status_code
        super().__init__(f"GET {url} failed: {cause}")


class ScrapeFailure(ScraperError):
    """複数ページ集約中の失敗. 途中までの結果は破棄される."""

    def __init__(self, base_url: str, cause: BaseException):
        self.base_url = base_url
        self.cause = cause
        super().__init__(f"Scraping of {base_url} failed.")

    @property
    def details(self) -> str:
        return str(self.cause) or type(self.cause).__name__
