import random

import pytest

from asskit.editor import (
    EditorState,
    apply,
    clamp_timing,
    screen_to_script,
    selected_caption,
    selected_overrides,
    current_caption_index,
    effective_duration,
    Load,
    Select,
    AddCaption,
    DeleteCaption,
    SplitCaption,
    MergeCaption,
    Retime,
    MoveCaption,
    UpdateText,
    SetOverrides,
    UNCHANGED,
    SetStyleField,
    SetCurrentTime,
    SetDuration,
    SetPlaying,
    MarkClean,
)
from asskit.document import parse_ass_content, serialize_ass
from asskit.models import ParsedDocument, Style
from asskit.tags import ass_text_to_plain


def _state(document, duration=10.0, selected=None):
    state = EditorState.load(document, duration=duration)
    if selected is not None:
        state = apply(state, Select(selected))
    return state


def _assert_invariants(state):
    captions = state.document.captions
    style_names = set(state.document.style_names())
    assert [c.index for c in captions] == list(range(len(captions)))
    for caption in captions:
        assert caption.end > caption.start
        assert caption.start >= 0
        assert caption.style in style_names


def test_load_resets_session(document):
    state = EditorState.load(document, duration=12.0)
    assert state.selected_index is None
    assert state.is_dirty is False
    assert state.duration == 12.0
    assert len(state.captions) == 3
    # The session works on its own copy
    assert state.document is not document


def test_load_action_replaces_document(document):
    state = _state(document, selected=1)
    state = apply(state, UpdateText(0, "changed"))
    reloaded = apply(state, Load(document))
    assert reloaded.selected_index is None
    assert reloaded.is_dirty is False
    assert reloaded.captions[0].plain_text == "Hello world"


def test_select_and_seek(document):
    state = _state(document)
    state = apply(state, Select(2, seek=True))
    assert state.selected_index == 2
    assert state.current_time == 5.0
    assert selected_caption(state).style == "Top"


def test_select_out_of_range_is_ignored(document):
    state = _state(document, selected=0)
    assert apply(state, Select(99)) is state
    assert apply(state, Select(None)).selected_index is None


def test_transitions_do_not_mutate_previous_state(document):
    before = _state(document, selected=0)
    after = apply(before, SplitCaption(at_time=1.0))
    assert len(before.captions) == 3
    assert before.captions[0].end == 2.0
    assert len(after.captions) == 4


def test_add_caption_without_selection_appends(document):
    state = apply(_state(document), AddCaption())
    assert len(state.captions) == 4
    added = state.captions[3]
    assert state.selected_index == 3
    assert (added.start, added.end) == (0.0, 1.0)
    assert added.text == "New caption"
    assert added.style == "Default"
    assert state.is_dirty is True


def test_add_caption_after_selection_at_playhead(document):
    state = _state(document, selected=0)
    state = apply(state, SetCurrentTime(1.2))
    state = apply(state, AddCaption(text="Inserted"))
    assert state.selected_index == 1
    added = state.captions[1]
    assert (added.start, added.end) == (1.2, 2.2)
    assert added.plain_text == "Inserted"
    assert [c.index for c in state.captions] == [0, 1, 2, 3]


def test_add_caption_near_end_fits_timeline(document):
    state = _state(document, duration=0.0)
    state = apply(state, SetCurrentTime(6.8))
    state = apply(state, AddCaption())
    added = state.captions[-1]
    assert added.start == 6.5
    assert added.end == 7.0


def test_add_caption_to_empty_document():
    document = ParsedDocument(styles=[Style(name="Main")])
    state = apply(EditorState.load(document), AddCaption())
    assert len(state.captions) == 1
    caption = state.captions[0]
    assert (caption.start, caption.end) == (0.0, 1.0)
    assert caption.style == "Main"


def test_delete_selects_nearest_remaining(document):
    state = apply(_state(document, selected=1), DeleteCaption())
    assert len(state.captions) == 2
    assert state.selected_index == 1
    assert state.captions[1].style == "Top"

    state = apply(_state(document, selected=2), DeleteCaption())
    assert state.selected_index == 1


def test_delete_everything_clears_selection(document):
    state = _state(document, selected=0)
    for _ in range(3):
        state = apply(state, DeleteCaption())
    assert state.captions == []
    assert state.selected_index is None


def test_split_caption_at_time(document):
    state = apply(_state(document, selected=0), SplitCaption(at_time=1.0))
    first, second = state.captions[0], state.captions[1]
    assert (first.start, first.end) == (0.0, 1.0)
    assert (second.start, second.end) == (1.0, 2.0)
    assert first.plain_text == "Hello"
    assert second.plain_text == "world"
    assert state.selected_index == 1
    assert [c.index for c in state.captions] == [0, 1, 2, 3]


def test_split_keeps_positional_prefix(document):
    state = apply(_state(document, selected=2), SplitCaption(at_time=6.0))
    assert state.captions[2].text == "{\\an8}Wait, what,"
    assert state.captions[3].text == "{\\an8}really?"


def test_split_near_boundary_uses_midpoint(document):
    state = apply(_state(document, selected=0), SplitCaption(at_time=0.05))
    assert state.captions[0].end == 1.0
    assert state.captions[1].start == 1.0


def test_split_defaults_to_playhead(document):
    state = _state(document, selected=2)
    state = apply(state, SetCurrentTime(5.5))
    state = apply(state, SplitCaption())
    assert state.captions[2].end == 5.5


def test_split_single_word_at_character_midpoint():
    document = ParsedDocument(styles=[Style()])
    state = apply(EditorState.load(document), AddCaption(text="Hello"))
    state = apply(state, SplitCaption(at_time=0.5))
    assert [c.plain_text for c in state.captions] == ["Hel", "lo"]


def test_split_too_short_is_ignored(document):
    state = _state(document, selected=0)
    state = apply(state, Retime(0, end=0.15))
    assert apply(state, SplitCaption(at_time=0.07)) is state


def test_merge_with_following(document):
    state = apply(_state(document, selected=0), MergeCaption())
    assert len(state.captions) == 2
    merged = state.captions[0]
    assert (merged.start, merged.end) == (0.0, 4.5)
    assert merged.plain_text == "Hello world Thishaskaraoke"
    assert state.selected_index == 0


def test_merge_last_caption_is_ignored(document):
    state = _state(document, selected=2)
    assert apply(state, MergeCaption()) is state


def test_merge_with_earlier_timed_neighbour(document):
    state = apply(_state(document, selected=2), SetCurrentTime(1.0))
    state = apply(state, AddCaption("Inserted"))
    assert state.captions[3].start == 1.0

    merged = apply(state, MergeCaption(index=2)).captions[2]
    assert (merged.start, merged.end) == (1.0, 7.0)
    assert merged.end > merged.start
    assert merged.plain_text.endswith("Inserted")


def test_split_then_merge_restores_timing(document):
    state = _state(document, selected=0)
    split = apply(state, SplitCaption(at_time=1.3))
    first, second = split.captions[0], split.captions[1]
    merged = apply(split, MergeCaption(index=0)).captions[0]
    assert merged.start == 0.0
    assert merged.end == 2.0
    assert merged.plain_text == f"{first.plain_text} {second.plain_text}"


def test_retime_end_below_gap_pushes_start(document):
    state = apply(_state(document), Retime(1, end=2.05))
    caption = state.captions[1]
    assert caption.end == pytest.approx(2.05)
    assert caption.start == pytest.approx(1.95)


def test_retime_start_past_end_pushes_end(document):
    state = apply(_state(document), Retime(1, start=4.45))
    caption = state.captions[1]
    assert caption.start == pytest.approx(4.45)
    assert caption.end == pytest.approx(4.55)


def test_retime_clamps_to_media_duration(document):
    state = apply(_state(document, duration=10.0), Retime(2, end=12.0))
    assert state.captions[2].end == 10.0

    state = apply(_state(document), Retime(0, start=-3.0))
    assert state.captions[0].start == 0.0


def test_clamp_timing():
    assert clamp_timing(1.0, 1.02, 'end') == (0.92, 1.02)
    assert clamp_timing(1.0, 1.02, 'start') == (1.0, 1.1)
    assert clamp_timing(-1.0, 2.0, 'both') == (0.0, 2.0)
    assert clamp_timing(9.95, 12.0, 'both', duration=10.0) == (9.9, 10.0)
    assert clamp_timing(0.0, 0.02, 'end') == (0.0, 0.1)


def test_move_caption_clamps_into_timeline(document):
    state = apply(_state(document), MoveCaption(0, -1.0))
    assert (state.captions[0].start, state.captions[0].end) == (0.0, 2.0)

    state = apply(_state(document, duration=10.0), MoveCaption(2, 5.0))
    assert (state.captions[2].start, state.captions[2].end) == (8.0, 10.0)

    state = apply(_state(document), MoveCaption(1, 0.5))
    assert (state.captions[1].start, state.captions[1].end) == (2.5, 5.0)


def test_update_text_keeps_text_and_plain_text_in_sync(document):
    state = apply(_state(document), UpdateText(1, "New words"))
    caption = state.captions[1]
    assert caption.text == "New words"
    assert caption.plain_text == "New words"

    state = apply(state, UpdateText(2, "Changed"))
    assert state.captions[2].text == "{\\an8}Changed"
    assert state.captions[2].plain_text == "Changed"


def test_update_text_unchanged_keeps_karaoke(document):
    state = apply(_state(document), UpdateText(1, "Thishaskaraoke"))
    assert state.captions[1].text == "{\\k50}This{\\k30}has{\\k40}karaoke"


def test_set_overrides(document):
    state = apply(_state(document, selected=0), SetOverrides(alignment=8, position=(100.2, 199.7)))
    caption = state.captions[0]
    assert caption.text == "{\\an8\\pos(100,200)}Hello world"
    assert caption.plain_text == "Hello world"

    overrides = selected_overrides(state)
    assert overrides.alignment == 8
    assert overrides.position == (100.0, 200.0)


def test_set_overrides_keeps_fields_not_supplied(document):
    state = apply(_state(document, selected=0), SetOverrides(alignment=8, position=(100, 200)))
    state = apply(state, SetOverrides(alignment=5))
    assert state.captions[0].text == "{\\an5\\pos(100,200)}Hello world"

    state = apply(state, SetOverrides(position=None))
    assert state.captions[0].text == "{\\an5}Hello world"

    state = apply(state, SetOverrides(index=2, alignment=None))
    assert state.captions[2].text == "Wait, what, really?"
    assert SetOverrides().alignment is UNCHANGED


def test_update_text_with_line_break_survives_save(document):
    edited = ass_text_to_plain("Line one\\NLine two")
    state = apply(_state(document), UpdateText(0, edited))
    assert state.captions[0].text == "Line one\\NLine two"

    state = apply(state, UpdateText(0, "First\nSecond"))
    reparsed = parse_ass_content(serialize_ass(state.document))
    assert len(reparsed.captions) == 3
    assert reparsed.captions[0].text == "First\\NSecond"
    assert ass_text_to_plain(reparsed.captions[0].text) == "First\nSecond"


def test_selected_overrides_falls_back_to_style(document):
    assert selected_overrides(_state(document, selected=0)).alignment == 2
    assert selected_overrides(_state(document, selected=2)).alignment == 8
    assert selected_overrides(_state(document)).alignment == 2


def test_set_style_field(document):
    before = _state(document)
    after = apply(before, SetStyleField("Default", "fontsize", 60))
    assert after.document.find_style("Default").fontsize == 60
    assert before.document.find_style("Default").fontsize == 48
    assert after.is_dirty is True


def test_rename_style_updates_captions(document):
    state = apply(_state(document), SetStyleField("Default", "name", "Main"))
    assert state.document.style_names() == ["Main", "Top"]
    assert [c.style for c in state.captions] == ["Main", "Main", "Top"]


def test_set_style_field_rejects_bad_edits(document):
    state = _state(document)
    with pytest.raises(ValueError):
        apply(state, SetStyleField("Default", "name", "Top"))
    with pytest.raises(ValueError):
        apply(state, SetStyleField("Default", "not_a_field", 1))
    assert apply(state, SetStyleField("Missing", "fontsize", 10)) is state


def test_playback_actions(document):
    state = _state(document, duration=0.0)
    state = apply(state, SetDuration(20.0))
    state = apply(state, SetPlaying(True))
    state = apply(state, SetCurrentTime(2.5))
    assert state.duration == 20.0
    assert state.is_playing is True
    assert current_caption_index(state) == 1
    assert effective_duration(state) == 20.0

    state = apply(state, SetCurrentTime(4.8))
    assert current_caption_index(state) is None


def test_effective_duration_covers_captions(document):
    assert effective_duration(_state(document, duration=0.0)) == 7.0


def test_mark_clean(document):
    state = apply(_state(document), UpdateText(0, "edited"))
    assert state.is_dirty is True
    assert apply(state, MarkClean()).is_dirty is False


def test_unknown_action_raises(document):
    with pytest.raises(TypeError):
        apply(_state(document), "split")


def test_screen_to_script():
    assert screen_to_script(640, 360, (1280, 720), (1920, 1080)) == (960.0, 540.0)
    assert screen_to_script(2000, -5, (1280, 720), (1920, 1080)) == (1920.0, 0.0)
    assert screen_to_script(100, 50, (1280, 720), (None, None)) == (100.0, 50.0)


def test_random_edit_sequences_preserve_invariants(document):
    rng = random.Random(1234)
    state = _state(document, duration=10.0)

    for _ in range(300):
        count = len(state.captions)
        choice = rng.randrange(8)
        index = rng.randrange(count) if count else None
        if choice == 0 and index is not None:
            action = Select(index)
        elif choice == 1:
            action = AddCaption()
        elif choice == 2 and count > 1:
            action = DeleteCaption(index)
        elif choice == 3:
            action = SplitCaption(at_time=rng.uniform(0, 10))
        elif choice == 4:
            action = MergeCaption(index)
        elif choice == 5 and index is not None:
            action = Retime(index, start=rng.uniform(-1, 12), end=rng.choice([None, rng.uniform(-1, 12)]))
        elif choice == 6 and index is not None:
            action = MoveCaption(index, rng.uniform(-5, 5))
        else:
            action = SetCurrentTime(rng.uniform(0, 10))

        state = apply(state, action)
        _assert_invariants(state)
