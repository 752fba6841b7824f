"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ProductRecord:
    """検索結果の1商品を表す."""

    title: str  # 商品名（空の商品は出力しない）
    id: str | None = None  # サイト側の商品識別子 (例: B0C1234567)
    rating: float | None = None  # 0〜5
    review_count: int | None = None
    image_url: str | None = None
    detail_url: str | None = None  # 商品詳細ページの絶対 URL

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "imageUrl": self.image_url,
            "detailUrl": self.detail_url,
        }


@dataclass
class PageResult:
    """1ページ分の取得・パース結果."""

    records: list[ProductRecord] = field(default_factory=list)  # 文書順
    has_next: bool = False


@dataclass
class SearchSummary:
    """複数ページを集約した検索結果."""

    keyword: str
    requested_page: int
    pages_fetched: int
    has_next: bool
    next_page: int | None  # None = 次ページなし
    total_pages: int | None  # None = ページ送りが見つからない
    records: list[ProductRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "page": self.requested_page,
            "pagesFetched": self.pages_fetched,
            "hasNext": self.has_next,
            "nextPage": self.next_page,
            "count": self.count,
            "totalPages": self.total_pages,
            "products": [r.to_dict() for r in self.records],
        }
