from moonlet.marks import (
    BLACKBIT,
    FIXEDBIT,
    SFIXEDBIT,
    WHITE0BIT,
    WHITE1BIT,
    WHITEBITS,
    bit2mask,
    bitmask,
    change_white,
    current_white_bits,
    gray_to_black,
    is_black,
    is_dead,
    is_gray,
    is_white,
    other_white,
)


def test_bitmasks_are_distinct_powers_of_two():
    masks = [bitmask(b) for b in range(7)]
    assert len(set(masks)) == 7
    for m in masks:
        assert m & (m - 1) == 0
    assert bit2mask(WHITE0BIT, WHITE1BIT) == WHITEBITS


def test_colours():
    white = bitmask(WHITE0BIT)
    assert is_white(white)
    assert not is_gray(white)
    assert is_gray(0)
    black = gray_to_black(0)
    assert is_black(black)
    assert not is_gray(black)
    assert not is_white(black)


def test_gray_to_black_keeps_other_bits():
    marked = bitmask(FIXEDBIT)
    assert gray_to_black(marked) & bitmask(FIXEDBIT)
    assert gray_to_black(gray_to_black(marked)) == gray_to_black(marked)


def test_change_white_swaps_shades():
    assert change_white(bitmask(WHITE0BIT)) == bitmask(WHITE1BIT)
    for m in range(128):
        assert change_white(change_white(m)) == m


def test_other_white_involution():
    for cw in range(128):
        assert other_white(other_white(cw)) == cw


def test_is_dead():
    cw = bitmask(WHITE0BIT)
    assert is_dead(cw, bitmask(WHITE1BIT))
    assert not is_dead(cw, bitmask(WHITE0BIT))
    assert not is_dead(cw, bitmask(BLACKBIT))


def test_new_state_white():
    cw = bit2mask(WHITE0BIT, FIXEDBIT)
    assert current_white_bits(cw) == bitmask(WHITE0BIT)
    main_thread = current_white_bits(cw) | bit2mask(FIXEDBIT, SFIXEDBIT)
    assert is_white(main_thread)
    assert not is_dead(cw, main_thread)