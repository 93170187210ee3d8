"""Sort and filter controls for the shopper's review list.

These run over reviews that are already approved; they never widen what a
shopper can see.
"""

from enum import Enum


class SortOrder(Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"
    HELPFUL = "helpful"


class ReviewFilter(Enum):
    ALL = "all"
    FIVE_STARS = "5"
    FOUR_STARS = "4"
    THREE_STARS = "3"
    TWO_STARS = "2"
    ONE_STAR = "1"
    VERIFIED = "verified"
    PHOTOS = "photos"


_SORT_KEYS = {
    SortOrder.NEWEST: (lambda r: r.created_at, True),
    SortOrder.OLDEST: (lambda r: r.created_at, False),
    SortOrder.HIGHEST: (lambda r: r.rating, True),
    SortOrder.LOWEST: (lambda r: r.rating, False),
    SortOrder.HELPFUL: (lambda r: r.helpful_count, True),
}


def sort_reviews(reviews, order=SortOrder.NEWEST):
    key, reverse = _SORT_KEYS[SortOrder(order)]
    return sorted(reviews, key=key, reverse=reverse)


def filter_reviews(reviews, option=ReviewFilter.ALL):
    option = ReviewFilter(option)

    if option == ReviewFilter.ALL:
        return list(reviews)
    if option == ReviewFilter.VERIFIED:
        return [r for r in reviews if r.is_verified_purchase]
    if option == ReviewFilter.PHOTOS:
        return [r for r in reviews if r.images]

    stars = int(option.value)
    return [r for r in reviews if r.rating == stars]


def browse(reviews, filter_by=ReviewFilter.ALL, sort_by=SortOrder.NEWEST):
    """Filter first, then sort, the way the product page applies its controls."""
    return sort_reviews(filter_reviews(reviews, filter_by), sort_by)
