"""マーケットプレイス検索結果のスクレイピングモジュール.

処理の流れ:
  1. 検索 URL を組み立てる (build_search_url)
  2. HTML を取得する (fetch_page)
  3. 1回だけパースし、商品カードの抽出とページ送りの判定を同じ文書に対して行う
     (parse_search_page)

フィールドの抽出はセレクタの候補リストを先頭から順に試す。
マークアップが変わった場合はリストを直すだけで済むようにしている。
"""

from __future__ import annotations

import asyncio
import logging
import re
from urllib.parse import urlencode, urljoin

import requests
from bs4 import BeautifulSoup, Tag

from marketscraper.config import HEADERS, SORT_ORDER, Settings
from marketscraper.errors import FetchError
from marketscraper.models import PageResult, ProductRecord
from marketscraper.pagination import detect_has_next, detect_last_page

logger = logging.getLogger(__name__)

# 検索結果グリッドの商品カード（広告枠 AdHolder は除外）
CARD_SELECTOR = (
    "div.s-main-slot div.s-result-item.s-asin[data-asin]"
    ":not([data-asin='']):not(.AdHolder)"
)

AD_HOLDER_CLASS = "AdHolder"
SPONSORED_SELECTORS = (
    "[aria-label='Sponsored']",
    ".s-sponsored-label-text",
    "[data-component-type='sp-sponsored-result']",
)

# (セレクタ, 属性名) — 属性名が None ならテキストを使う
TITLE_CHAIN = (
    ("h2 a span", None),
    ("h2 span", None),
)
RATING_CHAIN = (
    ("i.a-icon-star-small span.a-icon-alt", None),
    ("i.a-icon-star span.a-icon-alt", None),
    ("[aria-label$='out of 5 stars']", "aria-label"),
)
REVIEWS_CHAIN = (
    ("span[aria-label$='ratings']", "aria-label"),
    ("span[aria-label$='rating']", "aria-label"),
    ("span.a-size-base.s-underline-text", None),
)
IMAGE_CHAIN = (
    ("img.s-image", "src"),
    ("img.s-image", "data-src"),
)
LINK_CHAIN = (
    ("h2 a", "href"),
    ("a.a-link-normal.s-no-outline", "href"),
)

# "4.5 out of 5 stars" から 4.5 を抽出する正規表現
_RATING_PATTERN = re.compile(r"([\d.]+)\s+out of\s+5", re.IGNORECASE)
_NON_DIGIT_PATTERN = re.compile(r"\D")


def build_search_url(keyword: str, page: int, base_url: str) -> str:
    """検索結果ページの URL を組み立てる.

    並び順はレビュー順で固定。
    """
    params = urlencode({"k": keyword, "s": SORT_ORDER, "page": str(page)})
    return f"{base_url.rstrip('/')}/s?{params}"


def _get(url: str, settings: Settings) -> str:
    with requests.Session() as session:
        session.max_redirects = settings.max_redirects
        resp = session.get(url, headers=HEADERS, timeout=settings.request_timeout)
        resp.raise_for_status()
        return resp.text


async def fetch_page(url: str, settings: Settings) -> str:
    """検索ページの HTML を取得する.

    リトライはしない。待機中にタスクがキャンセルされた場合は
    CancelledError がそのまま伝播する。

    Args:
        url: 取得する URL
        settings: タイムアウト・リダイレクト上限を含む設定

    Returns:
        HTML 文字列

    Raises:
        FetchError: HTTP エラー・タイムアウト・接続失敗・リダイレクト超過
    """
    logger.debug("GET %s", url)
    try:
        return await asyncio.to_thread(_get, url, settings)
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        logger.error("検索ページ取得失敗: url=%s, status=%s", url, status)
        raise FetchError(url, e, status) from e
    except requests.RequestException as e:
        logger.error("検索ページ取得失敗: url=%s, error=%s", url, e)
        raise FetchError(url, e) from e


def parse_document(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def parse_search_page(markup: str, base_url: str) -> tuple[PageResult, int | None]:
    """HTML を1回だけパースし、商品リスト・次ページ有無・最終ページ番号を返す."""
    doc = parse_document(markup)
    records = extract_products(doc, base_url)
    return PageResult(records=records, has_next=detect_has_next(doc)), detect_last_page(doc)


def extract_products(doc: BeautifulSoup | str, base_url: str) -> list[ProductRecord]:
    """検索結果から広告以外の商品を文書順に抽出する.

    商品名が取れないカードは捨てる。1枚のカードで問題が起きても他のカードには影響しない。
    """
    if isinstance(doc, str):
        doc = parse_document(doc)

    records: list[ProductRecord] = []
    for card in doc.select(CARD_SELECTOR):
        try:
            if is_sponsored(card):
                continue
            record = _extract_card(card, base_url)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("商品カードの抽出をスキップ: data-asin=%s, error=%s",
                           card.get("data-asin"), e)
            continue
        if record is not None:
            records.append(record)

    logger.debug("商品カード %d 件を抽出", len(records))
    return records


def is_sponsored(card: Tag) -> bool:
    """カード単位で広告かどうかを判定する."""
    if AD_HOLDER_CLASS in (card.get("class") or []):
        return True
    return any(card.select_one(sel) is not None for sel in SPONSORED_SELECTORS)


def _extract_card(card: Tag, base_url: str) -> ProductRecord | None:
    title = _first_value(card, TITLE_CHAIN)
    if not title:
        return None

    product_id = _attr_text(card, "data-asin")
    return ProductRecord(
        id=product_id,
        title=title,
        rating=parse_rating(_first_value(card, RATING_CHAIN)),
        review_count=parse_review_count(_first_value(card, REVIEWS_CHAIN)),
        image_url=_first_value(card, IMAGE_CHAIN),
        detail_url=_resolve_detail_url(product_id, _first_value(card, LINK_CHAIN), base_url),
    )


def _first_value(node: Tag, chain: tuple[tuple[str, str | None], ...]) -> str | None:
    """候補セレクタを順に試し、最初に得られた空でない値を返す."""
    for selector, attr in chain:
        el = node.select_one(selector)
        if el is None:
            continue
        value = _attr_text(el, attr) if attr else el.get_text().strip()
        if value:
            return value
    return None


def _attr_text(el: Tag, attr: str) -> str | None:
    value = el.get(attr)
    # class などの多値属性はリストで返る
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    return value.strip() or None


def parse_rating(text: str | None) -> float | None:
    """'4.5 out of 5 stars' 形式の文字列から評価値を取り出す.

    それ以外の形式・範囲外の値は None。
    """
    if not text:
        return None
    m = _RATING_PATTERN.search(text)
    if not m:
        return None
    try:
        rating = float(m.group(1))
    except ValueError:
        return None
    if not 0 <= rating <= 5:
        return None
    return rating


def parse_review_count(text: str | None) -> int | None:
    """数字以外を取り除いてレビュー件数を得る."""
    if not text:
        return None
    digits = _NON_DIGIT_PATTERN.sub("", text)
    return int(digits) if digits else None


def _resolve_detail_url(product_id: str | None, href: str | None, base_url: str) -> str | None:
    if product_id:
        return f"{base_url.rstrip('/')}/dp/{product_id}"
    if href:
        return urljoin(base_url, href)
    return None
