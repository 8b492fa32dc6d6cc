"""工具函数模块"""

from .encoding import count_lines, is_binary_text, longest_line, pretty_parse_body
from .urls import extract_domain, parse_query_params

__all__ = [
    "count_lines",
    "is_binary_text",
    "longest_line",
    "pretty_parse_body",
    "extract_domain",
    "parse_query_params",
]
