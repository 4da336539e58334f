from utils.redact import dest_hint


def test_dest_hint_masks_all_but_tail():
    assert dest_hint("+15551234567") == "...4567"
    assert dest_hint("abc") == "abc"
    assert dest_hint(None) == ""
    assert dest_hint("  ") == ""
