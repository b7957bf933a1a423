"""
Fixed contract constants.

The reserved column names are part of the product CSV format and are not
user-configurable.
"""

SOURCE_FIELD = "*상품명"
DERIVED_FIELD = "금지어가 제거된 상품명"

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM
NORMALIZED_DELIMITER = ","
SNIFF_DELIMITERS = [",", ";", "\t", "|"]

EXPORT_PREFIX = "processed_"
DEFAULT_EXPORT_STEM = "product_data"
