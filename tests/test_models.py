import pytest

from subburn.exceptions import ConfigurationError
from subburn.models import Cue, CueDocument, SubtitleStyle


@pytest.fixture
def document():
    return CueDocument([
        Cue("00:00:00.000", "00:00:01.000", "one"),
        Cue("00:00:01.000", "00:00:02.000", "two"),
    ])


def test_cues_are_addressed_by_id(document):
    first, second = document.cues
    assert document.get(second.cue_id) is second
    assert first.cue_id != second.cue_id


def test_insert_after_and_append(document):
    first = document[0]
    inserted = document.insert_after(first.cue_id, Cue("00:00:00.500", "00:00:00.900", "half"))
    appended = document.insert_after(None, Cue("00:00:02.000", "00:00:03.000", "three"))
    assert [c.text for c in document] == ["one", "half", "two", "three"]
    assert document.get(inserted.cue_id).text == "half"
    assert document[-1] is appended


def test_delete_keeps_other_ids_valid(document):
    first, second = document.cues
    document.delete(first.cue_id)
    assert len(document) == 1
    assert document.get(second.cue_id).text == "two"
    with pytest.raises(KeyError):
        document.get(first.cue_id)


def test_update_text_and_timing(document):
    cue = document[1]
    document.update_text(cue.cue_id, "TWO")
    document.update_timing(cue.cue_id, "00:00:01.500", "00:00:02.500")
    assert cue.timing() == ("00:00:01.500", "00:00:02.500", "TWO")


def test_cue_text_is_trimmed_on_create_and_edit(document):
    assert Cue("00:00:00.000", "00:00:01.000", "  padded  ").text == "padded"
    cue = document[0]
    document.update_text(cue.cue_id, " edited\n")
    assert cue.text == "edited"


def test_unknown_id_raises_key_error(document):
    with pytest.raises(KeyError):
        document.update_text("nope", "x")


def test_replace_all(document):
    document.replace_all([Cue("00:00:05.000", "00:00:06.000", "new")])
    assert [c.text for c in document] == ["new"]


def test_cue_equality_ignores_id():
    assert Cue("00:00:00.000", "00:00:01.000", "x") == Cue("00:00:00.000", "00:00:01.000", "x")


def test_subtitle_style_defaults_are_valid():
    style = SubtitleStyle().validate()
    assert (style.position, style.outline, style.font_size) == (2, 3, 24)


@pytest.mark.parametrize("kwargs", [{"position": 4}, {"outline": 6}, {"outline": -1}, {"font_size": 0}])
def test_subtitle_style_rejects_out_of_range(kwargs):
    with pytest.raises(ConfigurationError):
        SubtitleStyle(**kwargs).validate()
