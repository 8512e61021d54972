import pytest

from practice_test_cbt.services.navigator import Navigator, page_of


def _navigator(total=45, ceiling=10):
    return Navigator(total, lambda ordinal: ordinal <= ceiling)


def test_next_refused_past_accessible_ceiling():
    nav = _navigator()
    nav.jump_to(10)
    assert nav.next() is False
    assert nav.current_ordinal == 10


def test_next_and_previous_move_by_one():
    nav = _navigator(ceiling=45)
    assert nav.next() is True
    assert nav.current_ordinal == 2
    assert nav.previous() is True
    assert nav.current_ordinal == 1


def test_previous_at_first_question_stays():
    nav = _navigator()
    assert nav.previous() is True
    assert nav.current_ordinal == 1


def test_next_at_last_question_is_a_no_op():
    nav = _navigator(total=3, ceiling=3)
    nav.jump_to(3)
    assert nav.next() is True
    assert nav.current_ordinal == 3


def test_jump_to_recomputes_page():
    nav = _navigator(ceiling=45)
    nav.jump_to(21)
    assert nav.current_page == 2
    nav.jump_to(41)
    assert nav.current_page == 3
    nav.next()
    nav.jump_to(20)
    assert nav.current_page == 1


def test_jump_to_locked_question_is_refused():
    nav = _navigator()
    assert nav.jump_to(11) is False
    assert nav.current_ordinal == 1


def test_jump_out_of_range_raises():
    nav = _navigator()
    with pytest.raises(ValueError):
        nav.jump_to(0)
    with pytest.raises(ValueError):
        nav.jump_to(46)


def test_pages_cover_all_questions_including_locked():
    nav = _navigator(total=45, ceiling=10)
    assert nav.total_pages == 3
    assert nav.page_range(3) == (41, 45)
    nav.set_page(2)
    assert nav.page_ordinals()[0] == 21
    assert nav.current_ordinal == 1
    assert nav.set_page(99) == 3


def test_toggle_flag():
    nav = _navigator()
    assert nav.toggle_flag() is True
    assert 1 in nav.flagged
    assert nav.toggle_flag(1) is False
    assert not nav.flagged


def test_page_of():
    assert page_of(1) == 1
    assert page_of(20) == 1
    assert page_of(21) == 2
