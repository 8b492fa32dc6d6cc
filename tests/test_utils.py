"""工具函数测试"""

from cli_network_viewer.utils.encoding import count_lines, is_binary_text, longest_line, pretty_parse_body
from cli_network_viewer.utils.urls import extract_domain, parse_query_params


class TestPrettyBody:
    """JSON 美化"""

    def test_object_is_indented(self):
        assert pretty_parse_body('{"a":1,"b":[1,2]}') == '{\n  "a": 1,\n  "b": [\n    1,\n    2\n  ]\n}'

    def test_non_ascii_kept(self):
        assert "中文" in pretty_parse_body('{"name":"中文"}')

    def test_not_json(self):
        assert pretty_parse_body("hello") is None
        assert pretty_parse_body("") is None

    def test_scalar_not_formatted(self):
        assert pretty_parse_body("42") is None


class TestLineMetrics:
    """行数与行宽"""

    def test_count_lines(self):
        assert count_lines(None) == 0
        assert count_lines("") == 0
        assert count_lines("a") == 1
        assert count_lines("a\nb\n") == 2

    def test_longest_line(self):
        assert longest_line(None) == 0
        assert longest_line("ab\nabcd\nabc") == 4


class TestBinaryDetection:
    """二进制内容判断"""

    def test_text_is_not_binary(self):
        assert is_binary_text('{"ok": true}\n') is False

    def test_null_byte(self):
        assert is_binary_text("abc\x00def") is True

    def test_control_characters(self):
        assert is_binary_text("\x01\x02\x03abc") is True

    def test_empty(self):
        assert is_binary_text(None) is False


class TestUrls:
    """URL 解析"""

    def test_query_params_keep_order_and_repeats(self):
        assert parse_query_params("http://h/x?a=1&b=2&a=3") == [("a", "1"), ("b", "2"), ("a", "3")]

    def test_blank_values(self):
        assert parse_query_params("http://h/x?flag&k=") == [("flag", ""), ("k", "")]

    def test_no_query(self):
        assert parse_query_params("http://h/x") == []

    def test_extract_domain(self):
        assert extract_domain("http://api.example.com:8080/x") == "api.example.com"
        assert extract_domain("not a url") == ""
