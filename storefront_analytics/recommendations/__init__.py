"""
Product recommendations over raw order history.

Modules
-------
ranking : count + rank primitive shared by every strategy — pure functions.
engine  : RecommendationEngine — co-purchase, category-affinity, trending,
          personalized, and the fallback chain between them.
"""
