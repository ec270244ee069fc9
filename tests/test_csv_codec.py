"""
Tests for CSV parsing and serialization.
"""
import unittest

from archive_intake.csv_codec import (CSVParseOptions, parse, parse_strict,
                                      parse_to_objects, stringify)
from archive_intake.exceptions import CSVParseError


class TestCSVCodec(unittest.TestCase):
    """Test cases for the CSV codec."""

    def test_parse_quoted_delimiter(self):
        """Test a delimiter inside quotes."""
        self.assertEqual(parse('a,"b,c"\nd,e'), [["a", "b,c"], ["d", "e"]])

    def test_parse_escaped_quote_and_newline(self):
        """Test doubled quotes and newlines inside quotes."""
        self.assertEqual(
            parse('"say ""hi""","line1\nline2"\nx,y'),
            [['say "hi"', "line1\nline2"], ["x", "y"]]
        )

    def test_parse_crlf(self):
        """Test that CRLF terminates a row once."""
        self.assertEqual(parse("a,b\r\nc,d\r\n"), [["a", "b"], ["c", "d"]])

    def test_round_trip(self):
        """Test that stringify inverts parse for quoted content."""
        texts = [
            'a,"b,c"\nd,e',
            'name,note\n"Smith, J.","He said ""no""\nthen left"',
            'x,,z\n,,',
        ]
        for text in texts:
            self.assertEqual(stringify(parse(text)), text)

    def test_options(self):
        """Test custom delimiter, trimming and empty-line skipping."""
        options = CSVParseOptions(delimiter=';', trim=True, skip_empty_lines=True)
        self.assertEqual(parse(" a ; b \n\n c;d", options), [["a", "b"], ["c", "d"]])
        self.assertEqual(parse("a\n\nb"), [["a"], [""], ["b"]])

    def test_unterminated_quote_is_lenient(self):
        """Test that an unterminated quote runs to the end instead of raising."""
        self.assertEqual(parse('a,"b\nc'), [["a", "b\nc"]])

    def test_strict_parse_raises(self):
        """Test that strict parsing reports an unterminated quote."""
        with self.assertRaises(CSVParseError):
            parse_strict('a,"b\nc')
        self.assertEqual(parse_strict('a,"b"'), [["a", "b"]])

    def test_empty_input(self):
        """Test that empty input yields no rows."""
        self.assertEqual(parse(""), [])
        self.assertEqual(parse(None), [])

    def test_stringify_values(self):
        """Test quoting rules and non-string values."""
        self.assertEqual(stringify([["plain", 'q"t', None, 45.5, "a\rb"]]),
                         'plain,"q""t",,45.5,"a\rb"')
        self.assertEqual(stringify([["a;b", "c"]], delimiter=';'), '"a;b";c')

    def test_parse_to_objects(self):
        """Test header mapping with short rows."""
        records = parse_to_objects("file,title,rights\nimg1.jpg,Apple\nimg2.jpg,Pear,CC0")
        self.assertEqual(records, [
            {"file": "img1.jpg", "title": "Apple", "rights": ""},
            {"file": "img2.jpg", "title": "Pear", "rights": "CC0"},
        ])
        self.assertEqual(parse_to_objects(""), [])


if __name__ == '__main__':
    unittest.main()
