"""複数ページの検索結果を集約する.

処理フロー:
  1. キーワード・ページ番号の検証と丸め
  2. 指定ページから順に 1 ページずつ取得・パース
  3. 次ページが無ければその時点で打ち切り
  4. 全ページの商品を結合してサマリを組み立てる

ページは必ず昇順・逐次で取得する（次を取得するかどうかは前のページの結果で決まる）。
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping

from marketscraper.config import Settings
from marketscraper.errors import InvalidRequest, ScrapeFailure
from marketscraper.models import ProductRecord, SearchSummary
from marketscraper.scraper import build_search_url, fetch_page, parse_search_page

logger = logging.getLogger(__name__)

MISSING_KEYWORD_MESSAGE = "Missing ?keyword="


async def search(
    keyword: str,
    page: int = 1,
    pages: int = 1,
    *,
    settings: Settings,
) -> SearchSummary:
    """キーワード検索を page から最大 pages ページ分実行して集約する.

    Args:
        keyword: 検索キーワード（前後の空白は除去）
        page: 開始ページ（1 未満は 1 に丸める）
        pages: 取得ページ数（1〜settings.max_pages に丸める）
        settings: 実行時設定

    Raises:
        InvalidRequest: キーワードが空（通信は一切行わない）
        ScrapeFailure: いずれかのページで失敗（途中までの結果は破棄）
    """
    keyword = (keyword or "").strip()
    if not keyword:
        raise InvalidRequest(MISSING_KEYWORD_MESSAGE)

    page = max(1, page)
    pages = max(1, min(settings.max_pages, pages))
    logger.info("検索開始: keyword=%s, page=%d, pages=%d", keyword, page, pages)

    records: list[ProductRecord] = []
    has_next = False
    last_page: int | None = None
    pages_fetched = 0

    try:
        for i in range(pages):
            current_page = page + i
            url = build_search_url(keyword, current_page, settings.base_url)
            html = await fetch_page(url, settings)
            result, page_last = parse_search_page(html, settings.base_url)
            pages_fetched += 1

            # 最終ページ番号は最初に取得したページのものだけ使う
            if i == 0:
                last_page = page_last

            records.extend(result.records)
            has_next = result.has_next
            logger.info("  page=%d → %d 件 (次ページ: %s)",
                        current_page, len(result.records), "あり" if has_next else "なし")
            if not has_next:
                break
    except asyncio.CancelledError:
        logger.info("検索がキャンセルされました: keyword=%s", keyword)
        raise
    except Exception as e:
        logger.exception("検索失敗: keyword=%s", keyword)
        raise ScrapeFailure(settings.base_url, e) from e

    # NOTE: サイトの最終ページ番号を取得ページ数で割っている（サイトの総ページ数とは一致しない）
    total_pages = math.ceil(last_page / pages) if last_page is not None else None

    summary = SearchSummary(
        keyword=keyword,
        requested_page=page,
        pages_fetched=pages_fetched,
        has_next=has_next,
        next_page=page + pages if has_next else None,
        total_pages=total_pages,
        records=records,
    )
    logger.info("検索完了: keyword=%s, %d ページ, %d 件", keyword, pages_fetched, summary.count)
    return summary


def _int_param(params: Mapping[str, str], name: str, default: int) -> int:
    raw = params.get(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


async def handle_request(params: Mapping[str, str], settings: Settings) -> tuple[int, dict]:
    """クエリパラメータ (keyword, page, pages) を受け取り、ステータスと応答ペイロードを返す."""
    keyword = str(params.get("keyword") or "")
    page = _int_param(params, "page", 1)
    pages = _int_param(params, "pages", 1)

    try:
        summary = await search(keyword, page, pages, settings=settings)
    except InvalidRequest as e:
        return 400, {"error": str(e)}
    except ScrapeFailure as e:
        return 500, {"error": str(e), "details": e.details}
    return 200, summary.to_dict()
