import pytest

from asskit import parse_ass_content


SAMPLE_ASS = """[Script Info]
; Script generated for tests
Title: Sample
ScriptType: v4.00+
PlayResX: 1920
PlayResY: 1080
WrapStyle: 0

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,48,&H00FFFFFF&,&H0000FFFF&,&H00000000&,&H80000000&,0,0,0,0,100,100,0,0,1,2,1,2,10,10,20,1
Style: Top,Impact,60,&H00FFFFFF&,&H0040DDFE&,&H00000000&,&H00000000&,-1,0,0,0,100,100,0,0,1,4,2,8,50,50,50,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Dialogue: 0,0:00:00.00,0:00:02.00,Default,,0,0,0,,Hello world
Dialogue: 0,0:00:02.00,0:00:04.50,Default,,0,0,0,,{\\k50}This{\\k30}has{\\k40}karaoke
Dialogue: 0,0:00:05.00,0:00:07.00,Top,Narrator,0,0,0,,{\\an8}Wait, what, really?
"""


MINIMAL_ASS = """[Script Info]
Title: Minimal

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,48,&H00FFFFFF&,&H0000FFFF&,&H00000000&,&H00000000&,0,0,0,0,100,100,0,0,1,2,0,2,10,10,10,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Dialogue: 0,0:00:00.00,0:00:02.00,Default,,0,0,0,,Hello world
"""


@pytest.fixture
def sample_ass():
    return SAMPLE_ASS


@pytest.fixture
def document():
    return parse_ass_content(SAMPLE_ASS)


class RecordingContext:
    """Drawing context that records every call for assertions."""

    def __init__(self):
        self.calls = []

    def set_font(self, font):
        self.calls.append(("set_font", font))

    def set_shadow(self, color, offset_x, offset_y, blur):
        self.calls.append(("set_shadow", color, offset_x, offset_y, blur))

    def stroke_text(self, text, x, y, color, width):
        self.calls.append(("stroke_text", text, x, y, color, width))

    def fill_text(self, text, x, y, color):
        self.calls.append(("fill_text", text, x, y, color))

    def clear_shadow(self):
        self.calls.append(("clear_shadow",))


@pytest.fixture
def recording_context():
    return RecordingContext()
