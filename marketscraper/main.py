"""マーケットプレイス検索スクレイパー — メインエントリーポイント.

使い方:
  python -m marketscraper.main KEYWORD [--page N] [--pages N]

結果（またはエラー）を JSON で標準出力に書き出す。
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime

from marketscraper.config import LOG_DIR, Settings
from marketscraper.search import handle_request


def setup_logging(settings: Settings) -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"scraper_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="検索結果ページから商品を取得する")
    parser.add_argument("keyword", help="検索キーワード")
    parser.add_argument("--page", default="1", help="開始ページ (default: 1)")
    parser.add_argument("--pages", default="1", help="取得ページ数 (default: 1)")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    """メイン処理. 終了コードを返す."""
    args = _parse_args(argv)
    settings = Settings.from_env()
    setup_logging(settings)
    logger = logging.getLogger(__name__)
    logger.info("=== 検索結果取得 開始 === (base_url=%s, max_pages=%d)",
                settings.base_url, settings.max_pages)

    params = {"keyword": args.keyword, "page": args.page, "pages": args.pages}
    status, payload = asyncio.run(handle_request(params, settings))

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    logger.info("=== 検索結果取得 完了 === (status=%d)", status)
    return 0 if status == 200 else 1


if __name__ == "__main__":
    sys.exit(run())
