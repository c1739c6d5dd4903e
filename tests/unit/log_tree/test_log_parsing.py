"""Parsing of marker-annotated ``jj log`` and ``jj diff --git`` output."""

from __future__ import annotations

import unittest

from jj_fixtures import APP_DIFF, LOG_OUTPUT, PARENT_ID, ROOT_ID, WORKING_COPY_ID, commit_line
from jjdag.errors import EngineInvocationError
from jjdag.log_tree import DiffLineNode, FileDiffNode, HunkNode, parse_diff, parse_log
from jjdag.log_tree.parse import LOG_TEMPLATE


class ParseLogTests(unittest.TestCase):
    def test_commits_carry_ids_flags_and_descriptions(self) -> None:
        commits = parse_log(LOG_OUTPUT)

        self.assertEqual([c.change_id for c in commits], [WORKING_COPY_ID, PARENT_ID, ROOT_ID])
        self.assertEqual([c.current_working_copy for c in commits], [True, False, False])
        self.assertEqual(commits[0].description_first_line, "add feature")
        self.assertIsNone(commits[2].description_first_line)

    def test_marker_is_removed_and_continuation_lines_join_previous_commit(self) -> None:
        commits = parse_log(LOG_OUTPUT)

        self.assertEqual(commits[0].lines, [f"@  {WORKING_COPY_ID} alice 2024-01-01 0123abcd", "│  add feature"])
        for commit in commits:
            for line in commit.lines:
                self.assertNotIn("\x1d", line)
                self.assertNotIn("\x1e", line)

    def test_colored_marker_payload_is_stripped(self) -> None:
        output = "\033[1m@\033[0m  \x1d\033[35mabc\033[0m\x1e@\x1e\033[33mmsg\033[0m\x1dabc"

        commit = parse_log(output)[0]

        self.assertEqual(commit.change_id, "abc")
        self.assertEqual(commit.description_first_line, "msg")

    def test_leading_blank_lines_are_ignored(self) -> None:
        commits = parse_log("\n\n" + commit_line("abc"))
        self.assertEqual(len(commits), 1)

    def test_output_before_first_commit_is_a_parse_error(self) -> None:
        with self.assertRaises(EngineInvocationError):
            parse_log("Warning: something\n" + commit_line("abc"))

    def test_malformed_marker_is_a_parse_error(self) -> None:
        with self.assertRaises(EngineInvocationError):
            parse_log("@  \x1dabc\x1dabc")
        with self.assertRaises(EngineInvocationError):
            parse_log("@  \x1dabc\x1e\x1e")

    def test_marker_separators_do_not_split_the_line(self) -> None:
        commits = parse_log("@  \x1dabc\x1e@\x1edesc\x1dabc alice\n│  desc\n")

        self.assertEqual(len(commits), 1)
        self.assertEqual(commits[0].change_id, "abc")
        self.assertTrue(commits[0].current_working_copy)
        self.assertEqual(commits[0].lines, ["@  abc alice", "│  desc"])

    def test_template_brackets_fields_with_markers(self) -> None:
        self.assertTrue(LOG_TEMPLATE.startswith('"\x1d" ++ change_id.short()'))
        self.assertIn("builtin_log_compact", LOG_TEMPLATE)


class ParseDiffTests(unittest.TestCase):
    def test_files_hunks_and_lines_are_nested(self) -> None:
        files = parse_diff(APP_DIFF)

        self.assertEqual([f.path for f in files], ["src/app.py", "README.md"])
        self.assertIsInstance(files[0], FileDiffNode)
        self.assertEqual(len(files[0].children), 1)
        hunk = files[0].children[0]
        self.assertIsInstance(hunk, HunkNode)
        self.assertEqual(hunk.new_start, 1)
        self.assertEqual(len(hunk.children), 5)
        self.assertTrue(all(isinstance(line, DiffLineNode) for line in hunk.children))

    def test_file_block_keeps_git_and_mode_headers_only(self) -> None:
        files = parse_diff(APP_DIFF)

        self.assertEqual(files[0].lines, ["diff --git a/src/app.py b/src/app.py"])
        self.assertEqual(files[1].lines, ["diff --git a/README.md b/README.md", "new file mode 100644"])

    def test_line_numbers_follow_the_new_side(self) -> None:
        hunk = parse_diff(APP_DIFF)[0].children[0]

        self.assertEqual([line.line_number for line in hunk.children], [1, 2, 2, 3, 4])

    def test_no_newline_marker_has_no_line_number(self) -> None:
        diff = "diff --git a/x b/x\n@@ -1 +1 @@\n-a\n+b\n\\ No newline at end of file\n"

        lines = parse_diff(diff)[0].children[0].children

        self.assertIsNone(lines[-1].line_number)

    def test_control_characters_in_content_stay_on_their_line(self) -> None:
        diff = "diff --git a/x b/x\n@@ -1,3 +1,3 @@\n a\n \x0c\n-c\n+b\n"

        lines = parse_diff(diff)[0].children[0].children

        self.assertEqual([line.lines for line in lines], [[" a"], [" \x0c"], ["-c"], ["+b"]])
        self.assertEqual([line.line_number for line in lines], [1, 2, 3, 3])

    def test_trailing_newline_adds_no_empty_line(self) -> None:
        diff = "diff --git a/x b/x\n@@ -1 +1 @@\n+b\n"

        self.assertEqual(len(parse_diff(diff)[0].children[0].children), 1)

    def test_colored_hunk_header_is_recognized(self) -> None:
        diff = "\033[1mdiff --git a/x b/x\033[0m\n\033[38;5;6m@@ -3,1 +7,1 @@\033[39m\n-a\n+b\n"

        hunk = parse_diff(diff)[0].children[0]

        self.assertEqual(hunk.new_start, 7)
        self.assertEqual([line.line_number for line in hunk.children], [7, 7])


if __name__ == "__main__":
    unittest.main()
