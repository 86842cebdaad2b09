"""
Review processing stages:
- Normalization: vendor record -> Review
- Selection: sort, watermark filter, truncate
- Formatting: Review -> fixed-layout text block
"""
