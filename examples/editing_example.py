"""
Caption editing example.

Demonstrates the editing state machine: split, merge, retime and
reposition captions, then save the result with a preset style.
"""

from asskit import (
    ASSParser,
    EditorState,
    Select,
    SplitCaption,
    MergeCaption,
    Retime,
    SetOverrides,
    UpdateText,
    apply,
    get_preset,
    validate_document,
)

def main():
    parser = ASSParser()
    document = parser.parse_file("captions.ass")

    # Every action returns a new state; keep the old ones for undo
    history = [EditorState.load(document, duration=30.0)]

    def edit(action):
        history.append(apply(history[-1], action))
        return history[-1]

    edit(Select(0, seek=True))
    state = edit(SplitCaption(at_time=1.2))
    print(f"After split: {len(state.captions)} captions")

    state = edit(Retime(state.selected_index, end=state.captions[state.selected_index].end + 0.5))
    state = edit(UpdateText(state.selected_index, "Fixed wording"))
    state = edit(SetOverrides(alignment=8))
    state = edit(MergeCaption(index=0))
    print(f"After merge: {len(state.captions)} captions")

    # Swap in the TikTok preset styles
    preset = get_preset("tiktok")
    state.document.styles.extend(preset.styles())
    for caption in state.document.captions:
        caption.style = preset.style.name

    errors = validate_document(state.document)
    if errors:
        for error in errors:
            print(f"Invalid: {error}")
        return

    output_file = parser.save(state.document, "captions.edited.ass")
    print(f"Saved to: {output_file} ({len(history) - 1} edits)")

if __name__ == "__main__":
    main()
