import unittest
import sys
import os

# Add parent to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chheader.errors import ProfileFormatError
from chheader.rules.models import HeaderEdit, Matcher, Profile, ProfileSet, RuleAction


class TestProfileParsing(unittest.TestCase):
    def test_camel_case_document(self):
        profile = Profile.from_dict({
            "id": "test-id",
            "name": "Test Profile",
            "color": "#ff0000",
            "notes": "Test notes",
            "enabled": True,
            "matchers": [{"id": "match-1", "urlFilter": "example.com", "resourceTypes": ["main_frame", "xmlhttprequest"]}],
            "requestHeaders": [{"id": "header-1", "header": "X-Custom-Header", "value": "custom-value"}],
            "responseHeaders": [],
        })
        self.assertEqual(profile.name, "Test Profile")
        self.assertEqual(profile.matchers[0], Matcher("match-1", "example.com", ("main_frame", "xmlhttprequest")))
        self.assertEqual(profile.request_headers[0], HeaderEdit("header-1", "X-Custom-Header", "custom-value", True))

    def test_missing_lists_and_empty_filter(self):
        profile = Profile.from_dict({"id": "p", "matchers": [{"id": "m", "urlFilter": ""}]})
        self.assertEqual(profile.matchers[0].url_filter, "*")
        self.assertEqual(profile.request_headers, ())
        self.assertFalse(profile.enabled)

    def test_header_enabled_defaults_true(self):
        self.assertTrue(HeaderEdit.from_dict({"id": "h", "header": "X"}).enabled)
        self.assertTrue(HeaderEdit.from_dict({"id": "h", "header": "X", "enabled": None}).enabled)
        self.assertFalse(HeaderEdit.from_dict({"id": "h", "header": "X", "enabled": False}).enabled)

    def test_round_trip_shape(self):
        data = {
            "id": "p", "name": "n", "color": "#fff", "notes": "", "enabled": True,
            "matchers": [{"id": "m", "urlFilter": "a.com"}],
            "requestHeaders": [{"id": "h", "header": "X", "value": "1", "enabled": False}],
            "responseHeaders": [],
        }
        self.assertEqual(Profile.from_dict(data).to_dict(), data)

    def test_scalar_fields_are_coerced_to_strings(self):
        m = Matcher.from_dict({"id": 1, "urlFilter": 3002})
        self.assertEqual(m, Matcher(id="1", url_filter="3002"))
        h = HeaderEdit.from_dict({"id": "h", "header": "X-Count", "value": 0})
        self.assertEqual(h.value, "0")

    def test_malformed_matchers(self):
        with self.assertRaises(ProfileFormatError):
            Matcher.from_dict({"id": "m", "resourceTypes": "main_frame"})
        with self.assertRaises(ProfileFormatError):
            Matcher.from_dict("example.com")
        with self.assertRaises(ProfileFormatError):
            Profile.from_dict({"id": "p", "matchers": {"id": "m"}})
        with self.assertRaises(ProfileFormatError):
            Profile.from_dict({"id": "p", "requestHeaders": ["X-Env"]})

    def test_invalid_documents(self):
        with self.assertRaises(ProfileFormatError):
            Profile.from_dict({"name": "no id"})
        with self.assertRaises(ProfileFormatError):
            Profile.from_dict(["not", "a", "mapping"])
        with self.assertRaises(ProfileFormatError):
            ProfileSet.from_dict({"profiles": {"id": "p"}})


class TestProfileSet(unittest.TestCase):
    def test_active_profile(self):
        ps = ProfileSet.from_dict({
            "activeProfileId": "b",
            "profiles": [{"id": "a", "enabled": True}, {"id": "b", "enabled": True}],
        })
        self.assertEqual(ps.active.id, "b")

    def test_no_active_id(self):
        ps = ProfileSet.from_dict({"profiles": [{"id": "a", "enabled": True}]})
        self.assertIsNone(ps.active)


class TestRuleAction(unittest.TestCase):
    def test_empty_sides_are_omitted(self):
        action = RuleAction.modify_headers((), ())
        self.assertTrue(action.is_empty)
        self.assertIsNone(action.request_headers)
        self.assertEqual(action.to_dict(), {"type": "modifyHeaders"})

if __name__ == "__main__":
    unittest.main()
