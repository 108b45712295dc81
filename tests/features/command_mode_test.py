from __future__ import annotations

from testing.runner import and_exit
from testing.runner import trigger_command_mode


def test_colon_starts_a_command(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.await_text_missing('margin 10')
        h.await_cursor_position(x=1, y=23)
        h.press('^C')
        h.await_text('cancelled')


def test_escape_starts_a_command(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        trigger_command_mode(h)
        h.press_and_enter(':margin 4')
        h.await_text('margin set to 4')


def test_invalid_command(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('fake')
        h.await_text('invalid command: :fake')


def test_wrong_number_of_arguments(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('margin')
        h.await_text('`:margin`: expected 1 args but got 0')


def test_quit(run, ten_lines):
    with run(str(ten_lines)) as h:
        h.press(':')
        h.press_and_enter('q')
        h.await_exit()


def test_margin_changes_the_context(run, hundred_lines):
    with run(str(hundred_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('margin 3')
        h.await_text('margin set to 3')

        h.press('18j')
        h.await_cursor_position(x=0, y=19)
        h.assert_screen_line_equals(1, 'line_0')

        h.press('j')
        h.await_cursor_position(x=0, y=19)
        h.assert_screen_line_equals(1, 'line_1')


def test_margin_shown_in_mode_line(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.assert_screen_line_equals(23, ' ' * 61 + 'margin 10 (visual)')
        h.press(':')
        h.press_and_enter('margin 2')
        h.await_text('margin set to 2')
        for _ in range(25):
            h.press('Left')
        h.assert_screen_line_equals(23, ' ' * 62 + 'margin 2 (visual)')


def test_margin_invalid(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('margin x')
        h.await_text('invalid margin: x')


def test_strict_and_nostrict(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('nostrict')
        h.await_text('counting logical lines')
        h.press(':')
        h.press_and_enter('strict')
        h.await_text('counting visual lines')


def test_smooth_toggles(run, hundred_lines):
    with run(str(hundred_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('smooth')
        h.await_text('smooth scrolling disabled')

        h.press('12j')
        h.await_cursor_position(x=0, y=13)
        h.assert_screen_line_equals(1, 'line_0')

        h.press(':')
        h.press_and_enter('smooth on')
        h.await_text('smooth scrolling enabled')

        h.press('j')
        h.await_cursor_position(x=0, y=12)
        h.assert_screen_line_equals(1, 'line_2')


def test_smooth_invalid_argument(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('smooth maybe')
        h.await_text('invalid argument: maybe')


def test_scrollmargin_takes_effect_when_disabled(run, hundred_lines):
    with run(str(hundred_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('scrollmargin 5')
        h.await_text('updated!')
        h.press(':')
        h.press_and_enter('smooth off')
        h.await_text('smooth scrolling disabled')

        h.press('16j')
        h.await_cursor_position(x=0, y=17)
        h.assert_screen_line_equals(1, 'line_0')

        h.press('j')
        h.await_cursor_position(x=0, y=6)
        h.assert_screen_line_equals(1, 'line_12')


def test_scrollmargin_invalid(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('scrollmargin -1')
        h.await_text('invalid scroll margin: -1')


def test_wrap_and_nowrap(run, tmpdir):
    f = tmpdir.join('f')
    f.write('x' * 100)

    with run(str(f)) as h, and_exit(h):
        h.assert_screen_line_equals(1, 'x' * 79 + '»')
        h.press(':')
        h.press_and_enter('wrap')
        h.await_text('updated!')
        h.assert_screen_line_equals(1, 'x' * 80)
        h.assert_screen_line_equals(2, 'x' * 20)
        h.press(':')
        h.press_and_enter('nowrap')
        h.await_text_missing('x' * 80)


def test_tabsize(run, tmpdir):
    f = tmpdir.join('f')
    f.write('\tx')

    with run(str(f)) as h, and_exit(h):
        h.assert_screen_line_equals(1, '    x')
        h.press(':')
        h.press_and_enter('tabsize 2')
        h.await_text('updated!')
        h.assert_screen_line_equals(1, '  x')


def test_tabsize_invalid(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press(':')
        h.press_and_enter('tabsize 0')
        h.await_text('invalid size: 0')


def test_blank_command(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        trigger_command_mode(h)
        h.press_and_enter('   ')
        h.await_text('invalid command:')
