"""
Basic ASSKit usage example.

Demonstrates downloading an ASS file, inspecting its captions and
saving it back to disk.
"""

from asskit import ASSDownloader, ASSParser, get_total_duration, seconds_to_timestamp

def main():
    # Initialize downloader and parser
    downloader = ASSDownloader()
    parser = ASSParser()

    # Download ASS file
    print("Downloading ASS file...")
    ass_path = downloader.download(
        url="https://example.com/captions.ass",
        output_dir="/tmp/ass"
    )
    print(f"Downloaded to: {ass_path}")

    # Parse document
    print("\nParsing ASS file...")
    document = parser.parse_file(ass_path)

    print(f"Styles: {', '.join(document.style_names())}")
    for caption in document.captions:
        start = seconds_to_timestamp(caption.start)
        end = seconds_to_timestamp(caption.end)
        print(f"  [{caption.index}] {start} --> {end} ({caption.style}) {caption.plain_text}")

    print(f"\nTotal duration: {get_total_duration(document.captions):.2f}s")

    # Save normalized copy
    output_file = parser.save(document, "/tmp/ass/normalized.ass")
    print(f"Saved to: {output_file}")

if __name__ == "__main__":
    main()
