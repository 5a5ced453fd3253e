"""
Customer segmentation.

Modules
-------
rfm    : Recency / Frequency / Monetary scoring and segment labels — pure.
engine : CustomerSegmentationEngine — lifetime metrics, RFM, category
         preferences and order timeline for one customer.
"""
