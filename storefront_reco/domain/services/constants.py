# Constants for the recommendation strategies and the mixed merger.
MAX_RECOMMENDATIONS = 10  # Default and maximum list size of every strategy
MIN_CO_PURCHASE = 2  # Bought together at least twice
MIN_RATING = 4.0  # 4+ stars
RATING_BAND = 1.0  # Max rating distance for rating affinity
TREND_DAYS = 30  # Trending window
RECENT_VIEWS_LIMIT = 10  # Seed views taken from a viewer's history

# Recommendation kinds (also the cache key namespaces)
KIND_FREQUENTLY_BOUGHT = "frequently-bought"
KIND_BROWSING_HISTORY = "browsing-history"
KIND_CATEGORY = "category"
KIND_RATING = "rating"
KIND_TRENDING = "trend"
KIND_SIMILAR = "similar"
KIND_MIXED = "mixed"

# Weight added per product returned by each strategy in mixed recommendations.
# Order is the order the strategies contribute to the score map.
MERGE_WEIGHTS = {
    KIND_FREQUENTLY_BOUGHT: 3.0,
    KIND_RATING: 2.5,
    KIND_BROWSING_HISTORY: 2.0,
    KIND_SIMILAR: 1.5,
    KIND_CATEGORY: 1.0,
}

# List of all supported kinds (useful for validation or enums)
ALL_KINDS = {
    KIND_FREQUENTLY_BOUGHT,
    KIND_BROWSING_HISTORY,
    KIND_CATEGORY,
    KIND_RATING,
    KIND_TRENDING,
    KIND_SIMILAR,
    KIND_MIXED,
}
