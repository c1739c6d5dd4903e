"""Screen composition: header, log list highlighting, info panel, overlays."""

from __future__ import annotations

import unittest
from unittest import mock

from jj_fixtures import FakeJj
from jjdag.ansi import REVERSE, SAVED_BG, display_width, strip_ansi
from jjdag.jj_command import LOCAL_BOOKMARK_TEMPLATE
from jjdag.render import info_panel_rows, log_list_geometry, render_frame, render_screen
from jjdag.runtime.model import Model

WIDTH = 60
HEIGHT = 12


def _make_model(responses: dict[tuple[str, ...], str] | None = None) -> Model:
    return Model("/repo", run=FakeJj(responses))


class GeometryTests(unittest.TestCase):
    def test_no_info_panel_without_info(self) -> None:
        model = _make_model()
        self.assertEqual(info_panel_rows(None, HEIGHT), 0)
        self.assertEqual(log_list_geometry(model, HEIGHT), (1, HEIGHT - 1))

    def test_info_panel_is_capped_to_keep_log_rows(self) -> None:
        model = _make_model()
        model.info_list = [f"line {n}" for n in range(50)]

        self.assertEqual(info_panel_rows(model.info_list, HEIGHT), 8)
        self.assertEqual(log_list_geometry(model, HEIGHT), (1, 3))


class RenderFrameTests(unittest.TestCase):
    def test_every_row_spans_the_width(self) -> None:
        model = _make_model()

        rows = render_frame(model, WIDTH, HEIGHT)

        self.assertEqual(len(rows), HEIGHT)
        self.assertTrue(all(display_width(row) == WIDTH for row in rows))

    def test_header_shows_repository_and_default_revset(self) -> None:
        model = _make_model()

        header = strip_ansi(render_frame(model, WIDTH, HEIGHT)[0])

        self.assertTrue(header.startswith("repository: /repo  revset: default"))
        self.assertNotIn("--ignore-immutable", header)
        model.toggle_ignore_immutable()
        self.assertIn("--ignore-immutable", strip_ansi(render_frame(model, WIDTH, HEIGHT)[0]))

    def test_selected_block_is_reversed(self) -> None:
        model = _make_model()

        rows = render_frame(model, WIDTH, HEIGHT)

        self.assertTrue(rows[1].startswith(REVERSE))
        self.assertTrue(rows[2].startswith(REVERSE))
        self.assertFalse(rows[3].startswith(REVERSE))

    def test_saved_block_uses_its_own_background(self) -> None:
        model = _make_model()
        model.save_selection()
        model.log_select(3)

        rows = render_frame(model, WIDTH, HEIGHT)

        self.assertTrue(rows[1].startswith(SAVED_BG))
        self.assertTrue(rows[6].startswith(REVERSE))

    def test_info_panel_sits_below_a_rule(self) -> None:
        model = _make_model()
        model.show_message("hello")

        rows = render_frame(model, WIDTH, HEIGHT)

        self.assertEqual(strip_ansi(rows[-2]), "─" * WIDTH)
        self.assertEqual(strip_ansi(rows[-1]).rstrip(), "hello")

    def test_description_is_edited_in_place_of_second_line(self) -> None:
        model = _make_model()
        model.jj_describe_start(ignore_immutable=False)

        rows = render_frame(model, WIDTH, HEIGHT)

        self.assertEqual(strip_ansi(rows[2]).rstrip(), "│  add feature")
        self.assertFalse(rows[2].startswith(REVERSE))
        self.assertTrue(rows[1].startswith(REVERSE))

    def test_bookmark_name_is_edited_after_first_line(self) -> None:
        model = _make_model()
        model.jj_bookmark_create_start()
        model.text_input.insert("topic")

        rows = render_frame(model, WIDTH * 2, HEIGHT)

        self.assertIn("[topic", strip_ansi(rows[1]))

    def test_revset_is_edited_in_header(self) -> None:
        model = _make_model()
        model.set_revset()
        model.text_input.insert("mine()")

        header = strip_ansi(render_frame(model, WIDTH, HEIGHT)[0])

        self.assertIn("revset: mine()", header)

    def test_popup_is_drawn_over_the_log(self) -> None:
        model = _make_model({("bookmark", "list", "-T", LOCAL_BOOKMARK_TEMPLATE): "main\nfeature\n"})
        model.jj_bookmark_delete()

        text = "\n".join(strip_ansi(row) for row in render_frame(model, WIDTH, HEIGHT))

        self.assertIn(" Delete Bookmark ", text)
        self.assertIn("▸ main", text)
        self.assertIn("  feature", text)

    def test_prompt_shows_placeholder_until_typed(self) -> None:
        model = _make_model()
        model.jj_next_prev(direction="next", mode="default", offset=True)

        text = "\n".join(strip_ansi(row) for row in render_frame(model, WIDTH, HEIGHT))

        self.assertIn(" Enter Offset ", text)
        self.assertIn("positive integer", text)


class RenderScreenTests(unittest.TestCase):
    def test_writes_full_frame_and_records_layout(self) -> None:
        model = _make_model()
        model.show_message("hello")
        writes: list[bytes] = []

        def capture(_fd: int, data: bytes) -> int:
            writes.append(data)
            return len(data)

        with mock.patch("jjdag.render.os.write", side_effect=capture):
            render_screen(model, WIDTH, HEIGHT, 1)

        payload = b"".join(writes).decode("utf-8")
        self.assertTrue(payload.startswith("\033[H\033[J"))
        self.assertEqual(payload.count("\r\n"), HEIGHT - 1)
        self.assertEqual(
            (model.log_list_layout.top, model.log_list_layout.height, model.log_list_layout.width),
            (1, HEIGHT - 3, WIDTH),
        )


if __name__ == "__main__":
    unittest.main()
