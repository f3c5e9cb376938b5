import pytest

from fractalid.brackets import remove_outermost_brackets


def test_nested_expression():
    assert (
        remove_outermost_brackets("((Re(Z)*(Im(Z))^(Alpha))+InitZ)")
        == "(Re(Z)*(Im(Z))^(Alpha))+InitZ"
    )


def test_simple_sum():
    assert remove_outermost_brackets("(a+b)") == "a+b"


def test_separate_groups_untouched():
    assert remove_outermost_brackets("(a)+(b)") == "(a)+(b)"


def test_multiple_layers():
    assert remove_outermost_brackets("(((z)))") == "z"


def test_no_brackets():
    assert remove_outermost_brackets("z+1") == "z+1"


def test_empty_pair():
    assert remove_outermost_brackets("()") == ""


def test_inner_layer_stops_at_split_groups():
    assert remove_outermost_brackets("((a)*(b))") == "(a)*(b)"


def test_unbalanced_raises():
    with pytest.raises(ValueError):
        remove_outermost_brackets("(a))(b)")