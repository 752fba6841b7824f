"""ページ送りの判定.

商品抽出とは独立に、同じパース済み文書から
「次ページがあるか」と「ページ送りに表示される最終ページ番号」を読み取る。
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

NEXT_SELECTORS = (
    "a.s-pagination-next:not(.s-pagination-disabled):not([aria-disabled='true'])",
    "a[aria-label='Go to next page']",
)

# (ページ送りコンテナ, 各項目) — 上から順に試す
PAGINATION_STRIPS = (
    (".s-pagination-strip", ".s-pagination-item"),
    ("ul.a-pagination", "li"),
)

# 前へ・次へ・省略記号
EXCLUDED_ITEM_CLASSES = frozenset({
    "s-pagination-previous",
    "s-pagination-next",
    "s-pagination-ellipsis",
    "a-last",
})
ELLIPSIS_TEXTS = frozenset({"...", "…"})

_TRAILING_NUMBER_PATTERN = re.compile(r"(\d+)\s*$")


def detect_has_next(doc: BeautifulSoup) -> bool:
    """有効な「次へ」リンクがあれば True."""
    return any(doc.select_one(sel) is not None for sel in NEXT_SELECTORS)


def detect_last_page(doc: BeautifulSoup) -> int | None:
    """ページ送りの最後の番号を返す.

    ページ送りが無い、または数値の項目が無い場合は None。
    """
    for strip_selector, item_selector in PAGINATION_STRIPS:
        strip = doc.select_one(strip_selector)
        if strip is None:
            continue
        items = [item for item in strip.select(item_selector) if not _is_excluded(item)]
        page_number = _page_number(items[-1]) if items else None
        if page_number is not None:
            return page_number

    logger.debug("ページ送りが見つかりません")
    return None


def _is_excluded(item: Tag) -> bool:
    if EXCLUDED_ITEM_CLASSES.intersection(item.get("class") or []):
        return True
    return item.get_text().strip() in ELLIPSIS_TEXTS


def _page_number(item: Tag) -> int | None:
    label = item.get_text().strip()
    if label.isdecimal():
        return int(label)

    # 例: aria-label="Go to page 20"
    aria_label = item.get("aria-label") or ""
    m = _TRAILING_NUMBER_PATTERN.search(aria_label)
    if m:
        return int(m.group(1))
    return None
