"""
Body 格式化工具

对请求体/响应体做 JSON 美化，并计算展示所需的行数与最长行宽度。
"""

import json

# 只检查前 8KB，避免大 Body 的性能问题
_SAMPLE_SIZE = 8192


def pretty_parse_body(body: str) -> str | None:
    """
    将 JSON 文本格式化为带缩进的多行文本

    Args:
        body: 原始 Body 文本

    Returns:
        格式化后的文本；Body 不是合法 JSON 时返回 None
    """
    if not body or not body.strip():
        return None

    try:
        parsed = json.loads(body)
    except (ValueError, RecursionError):
        return None

    # 纯标量（如 "42"）没有格式化的意义
    if not isinstance(parsed, (dict, list)):
        return None

    return json.dumps(parsed, indent=2, ensure_ascii=False)


def count_lines(text: str | None) -> int:
    """统计文本行数，None 视为 0 行"""
    if not text:
        return 0
    return len(text.splitlines())


def longest_line(text: str | None) -> int:
    """返回最长一行的字符数"""
    if not text:
        return 0
    return max((len(line) for line in text.splitlines()), default=0)


def is_binary_text(text: str | None) -> bool:
    """
    判断文本是否更像二进制内容

    使用以下启发式规则：
    1. 包含空字符
    2. 不可打印控制字符比例超过 10%
    """
    if not text:
        return False

    sample = text[:_SAMPLE_SIZE]

    if "\x00" in sample:
        return True

    non_printable = 0
    for char in sample:
        # 排除常见空白字符 (tab, newline, carriage return)
        if ord(char) < 32 and char not in "\t\n\r":
            non_printable += 1

    return non_printable / len(sample) > 0.1
