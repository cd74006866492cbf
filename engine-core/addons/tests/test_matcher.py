import unittest
import sys
import os

# Add parent to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chheader.rules.matcher import (
    MatcherFormat,
    detect_format,
    evaluate,
    generate_examples,
    get_format_help,
    get_format_name,
    match_url,
    validate_pattern,
    wildcard_to_regex,
)


class TestDetectFormat(unittest.TestCase):
    def test_simple(self):
        self.assertEqual(detect_format("localhost:3002"), MatcherFormat.SIMPLE)
        self.assertEqual(detect_format("api.example.com"), MatcherFormat.SIMPLE)

    def test_empty_is_simple(self):
        self.assertEqual(detect_format(""), MatcherFormat.SIMPLE)

    def test_wildcard(self):
        self.assertEqual(detect_format("a.com/*"), MatcherFormat.WILDCARD)
        self.assertEqual(detect_format("*.api.example.com"), MatcherFormat.WILDCARD)

    def test_regex(self):
        self.assertEqual(detect_format("regex:a.*"), MatcherFormat.REGEX)
        # Prefix wins over the "*" check
        self.assertEqual(detect_format("regex:.*example\\.com"), MatcherFormat.REGEX)

    def test_format_is_a_plain_string(self):
        self.assertEqual(detect_format("x*"), "wildcard")


class TestValidatePattern(unittest.TestCase):
    def test_valid_patterns(self):
        for p in ["localhost:3002", "*.example.com", "example.com/api/*", "regex:localhost:30(0[0-9])"]:
            with self.subTest(pattern=p):
                self.assertTrue(validate_pattern(p).valid)

    def test_empty(self):
        result = validate_pattern("")
        self.assertFalse(result.valid)
        self.assertEqual(result.error, "Pattern cannot be empty.")

    def test_invalid_regex(self):
        result = validate_pattern("regex:[invalid")
        self.assertFalse(result.valid)
        self.assertIn("Invalid regex", result.error)

    def test_reserved_characters_outside_regex(self):
        for p in ["example.com[test]", "a{1}", "(api).com", "*.x)"]:
            with self.subTest(pattern=p):
                result = validate_pattern(p)
                self.assertFalse(result.valid)
                self.assertIn("regex:", result.error)


class TestSimpleMatching(unittest.TestCase):
    def test_exact_and_prefix(self):
        self.assertTrue(evaluate("localhost:3002", "localhost:3002"))
        self.assertTrue(evaluate("localhost:3002", "localhost:3002/api/users"))

    def test_substring(self):
        self.assertTrue(evaluate("example.com", "api.example.com"))

    def test_no_match(self):
        self.assertFalse(evaluate("localhost:3002", "localhost:3001"))
        self.assertFalse(evaluate("example.com", "other.com"))

    def test_case_insensitive(self):
        self.assertTrue(evaluate("LOCALHOST:3002", "localhost:3002"))
        self.assertTrue(evaluate("localhost:3002", "LOCALHOST:3002"))


class TestWildcardMatching(unittest.TestCase):
    def test_trailing_star(self):
        self.assertTrue(evaluate("localhost:3002/*", "localhost:3002/api"))
        self.assertTrue(evaluate("localhost:3002/*", "localhost:3002/api/users"))

    def test_subdomain(self):
        self.assertTrue(evaluate("*.api.example.com", "staging.api.example.com"))
        self.assertTrue(evaluate("*.example.com", "api.staging.example.com"))

    def test_multiple_stars(self):
        self.assertTrue(evaluate("localhost:*/api/*", "localhost:8000/api/data"))

    def test_whole_url_must_match(self):
        self.assertFalse(evaluate("localhost:3002/api/*", "localhost:3002/admin/settings"))
        self.assertFalse(evaluate("localhost:300*", "localhost:3010"))
        self.assertTrue(evaluate("localhost:300*", "localhost:3009"))

    def test_dots_are_literal(self):
        self.assertFalse(evaluate("*.example.com", "test.exampleXcom"))

    def test_pipe_anchors(self):
        self.assertEqual(wildcard_to_regex("|a*|"), "^^a.*$$")
        self.assertTrue(evaluate("|http://*|", "http://x.test"))

    def test_case_insensitive(self):
        self.assertTrue(evaluate("*.EXAMPLE.com", "api.example.COM"))


class TestRegexMatching(unittest.TestCase):
    def test_port_range(self):
        self.assertTrue(evaluate("regex:localhost:30(0[0-9])", "localhost:3000"))
        self.assertTrue(evaluate("regex:localhost:30(0[0-9])", "localhost:3009"))
        self.assertFalse(evaluate("regex:localhost:30(0[0-9])", "localhost:3010"))

    def test_unanchored_search(self):
        self.assertTrue(evaluate("regex:example\\.com", "https://example.com/x"))
        self.assertFalse(evaluate("regex:example\\.com", "exampleXcom"))

    def test_alternation(self):
        self.assertTrue(evaluate("regex:(staging|prod)-api\\.example\\.com", "prod-api.example.com"))
        self.assertFalse(evaluate("regex:(staging|prod)-api\\.example\\.com", "dev-api.example.com"))

    def test_case_insensitive(self):
        self.assertTrue(evaluate("regex:LOCALHOST:3002", "localhost:3002"))

    def test_broken_pattern_is_a_miss(self):
        self.assertFalse(evaluate("regex:[unclosed", "[unclosed"))

    def test_match_url_reports_format(self):
        result = match_url("regex:abc", "xabcx")
        self.assertTrue(result.matches)
        self.assertEqual(result.format, MatcherFormat.REGEX)


class TestPresentationHelpers(unittest.TestCase):
    def test_examples_simple(self):
        examples = generate_examples("localhost:3002")
        self.assertEqual(examples[0], "localhost:3002")
        self.assertIn("localhost:3002/api/users", examples)

    def test_examples_wildcard(self):
        examples = generate_examples("*.api.example.com")
        self.assertEqual(examples, ["example.api.example.com", "example.api.example.com/api", "example.api.example.com/users"])

    def test_examples_regex(self):
        self.assertEqual(generate_examples("regex:localhost:30(0[0-9])"), ["regex:localhost:30(0[0-9])"])

    def test_format_names(self):
        self.assertEqual(get_format_name(MatcherFormat.SIMPLE), "Simple")
        self.assertEqual(get_format_name("wildcard"), "Wildcard")
        self.assertEqual(get_format_name(MatcherFormat.REGEX), "Regex")

    def test_format_help(self):
        self.assertIn("domain", get_format_help(MatcherFormat.SIMPLE))
        self.assertIn("*", get_format_help(MatcherFormat.WILDCARD))
        self.assertIn("regex", get_format_help(MatcherFormat.REGEX))

if __name__ == "__main__":
    unittest.main()
