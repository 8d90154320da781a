import json
import unittest

from codex_sessions.parsers.records import parse_records
from codex_sessions.parsers.summary import REQUEST_MARKER, extract_summary, find_request_message


def _user_message(message) -> dict:
    return {"type": "event_msg", "payload": {"type": "user_message", "message": message}}


def _records(*entries: dict):
    return parse_records("\n".join(json.dumps(entry) for entry in entries))


class ExtractSummaryTests(unittest.TestCase):
    def test_returns_trimmed_text_after_marker(self) -> None:
        records = _records(_user_message("prefix My request for Codex: the actual ask"))
        self.assertEqual(extract_summary(records, "rollout.jsonl"), "the actual ask")

    def test_multiline_request_is_trimmed_but_not_truncated(self) -> None:
        records = _records(_user_message("context\n\nMy request for Codex:\n  fix the tests\nand lint  \n"))
        self.assertEqual(extract_summary(records, "f.jsonl"), "fix the tests\nand lint")

    def test_falls_back_to_name_without_matching_event(self) -> None:
        records = _records(
            {"type": "session_meta", "payload": {"cwd": "/tmp"}},
            _user_message("no marker here"),
            {"type": "event_msg", "payload": {"type": "agent_message", "message": "My request for Codex: nope"}},
            {"type": "response_item", "payload": {"type": "user_message", "message": "My request for Codex: nope"}},
        )
        self.assertEqual(extract_summary(records, "rollout-1.jsonl"), "rollout-1.jsonl")

    def test_empty_remainder_is_kept(self) -> None:
        records = _records(_user_message("My request for Codex:"))
        self.assertEqual(extract_summary(records, "rollout.jsonl"), "")

    def test_whitespace_only_remainder_is_empty_not_fallback(self) -> None:
        records = _records(_user_message("My request for Codex:   \n\t"))
        self.assertEqual(extract_summary(records, "rollout.jsonl"), "")

    def test_first_matching_event_wins(self) -> None:
        records = _records(
            _user_message("warmup"),
            _user_message("My request for Codex: first"),
            _user_message("My request for Codex: second"),
        )
        self.assertEqual(extract_summary(records, "x"), "first")

    def test_only_first_marker_occurrence_splits(self) -> None:
        records = _records(_user_message("My request for Codex: quote 'My request for Codex:' literally"))
        self.assertEqual(extract_summary(records, "x"), "quote 'My request for Codex:' literally")

    def test_missing_or_non_string_message_is_skipped(self) -> None:
        records = _records(
            {"type": "event_msg", "payload": {"type": "user_message"}},
            _user_message(None),
            _user_message(["My request for Codex: list"]),
            {"type": "event_msg"},
            _user_message("My request for Codex: real"),
        )
        self.assertEqual(extract_summary(records, "x"), "real")

    def test_no_records_returns_fallback(self) -> None:
        self.assertEqual(extract_summary([], "empty.jsonl"), "empty.jsonl")

    def test_find_request_message_returns_payload(self) -> None:
        records = _records(_user_message("a"), _user_message("b My request for Codex: c"))
        payload = find_request_message(records)
        self.assertIsNotNone(payload)
        self.assertEqual(payload.message, "b My request for Codex: c")
        self.assertIsNone(find_request_message(_records(_user_message("a"))))

    def test_matches_index_based_slice_for_every_matching_message(self) -> None:
        # Any message that passes the contains-check always has a marker index.
        messages = [
            "My request for Codex: a",
            "x My request for Codex:",
            "My request for Codex:My request for Codex: twice",
            "  lead\nMy request for Codex:\tdo it  ",
        ]
        for message in messages:
            with self.subTest(message=message):
                idx = message.find(REQUEST_MARKER)
                self.assertNotEqual(idx, -1)
                expected = message[idx + len(REQUEST_MARKER):].strip()
                self.assertEqual(extract_summary(_records(_user_message(message)), "fallback"), expected)


if __name__ == "__main__":
    unittest.main()
