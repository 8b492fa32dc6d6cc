"""URL 相关工具"""

from urllib.parse import parse_qsl, urlsplit


def parse_query_params(url: str) -> list[tuple[str, str]]:
    """
    解析 URL 中的查询参数

    保留参数出现顺序与重复参数；没有值的参数（如 ?flag）值为空字符串。

    Args:
        url: 完整 URL

    Returns:
        (名称, 值) 列表
    """
    try:
        query = urlsplit(url).query
    except ValueError:
        return []

    if not query:
        return []

    return parse_qsl(query, keep_blank_values=True)


def extract_domain(url: str) -> str:
    """从 URL 中提取域名（去除端口号）"""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""
