"""
Time-based queries over caption lists.
"""

from typing import List, Optional

from ..models import Caption


def get_caption_at_time(captions: List[Caption], time: float) -> Optional[Caption]:
    """
    Get the first caption active at a specific time.

    A caption is active on the half-open interval [start, end).

    Args:
        captions: List of captions
        time: Time in seconds

    Returns:
        Caption at that time, or None
    """
    for caption in captions:
        if caption.start <= time < caption.end:
            return caption
    return None


def sort_captions_by_time(captions: List[Caption]) -> List[Caption]:
    """
    Sort captions by start time and re-assign dense indices.

    The sort is stable, so captions sharing a start keep their order.

    Args:
        captions: List of captions (sorted in place)

    Returns:
        The same list, sorted
    """
    captions.sort(key=lambda caption: caption.start)
    for position, caption in enumerate(captions):
        caption.index = position
    return captions


def get_total_duration(captions: List[Caption]) -> float:
    """End time of the last caption in list order, 0 for an empty list."""
    if not captions:
        return 0.0
    return captions[-1].end


def max_caption_end(captions: List[Caption]) -> float:
    """Latest end time across all captions, 0 for an empty list."""
    return max((caption.end for caption in captions), default=0.0)


def captions_overlap(first: Caption, second: Caption) -> bool:
    """Check whether two captions overlap; touching boundaries do not count."""
    return first.start < second.end and second.start < first.end
