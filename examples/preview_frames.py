"""
Karaoke preview example.

Demonstrates rendering paint plans for a few frames and replaying them
onto a drawing context. The context here just prints its calls; a real
host would forward them to its canvas.
"""

from asskit import ASSParser, render_frame, replay

class PrintingContext:
    def set_font(self, font):
        print(f"    font {font}")

    def set_shadow(self, color, offset_x, offset_y, blur):
        print(f"    shadow {color} ({offset_x:.1f}, {offset_y:.1f})")

    def stroke_text(self, text, x, y, color, width):
        print(f"    stroke {text!r} at ({x:.1f}, {y:.1f}) {color} width {width:.1f}")

    def fill_text(self, text, x, y, color):
        print(f"    fill {text!r} at ({x:.1f}, {y:.1f}) {color}")

    def clear_shadow(self):
        pass

def main():
    document = ASSParser().parse_file("captions.ass")
    context = PrintingContext()

    for time in (0.5, 1.0, 1.5, 2.0):
        print(f"Frame at {time:.2f}s")
        plan = render_frame(document, time, (1280, 720))
        if not plan:
            print("    (no caption)")
        replay(plan, context)

if __name__ == "__main__":
    main()
